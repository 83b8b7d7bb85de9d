from flask import Flask, request, jsonify
from flask_cors import CORS
import pseudoasm

app = Flask(__name__)
app.config.from_mapping(
    PSEUDOASM_FLATTEN=False,
    PSEUDOASM_STRICT_TARGETS=False,
)
app.config.from_prefixed_env()
CORS(app)  # allow cross-origin requests

def ast_to_dict(node):
    """
    Serialize AST to dict recursively
    """
    if node is None:
        return None
    d = {"kind": node.kind}
    if node.kind in (pseudoasm.VAR_REF, pseudoasm.NUMBER_LITERAL, pseudoasm.ASSIGN_NODE):
        d["value"] = node.value
    if node.kind != pseudoasm.VAR_REF and node.kind != pseudoasm.NUMBER_LITERAL:
        d["left"] = ast_to_dict(node.left)
        d["right"] = ast_to_dict(node.right)
    return d

@app.route("/compile", methods=["POST"])
def compile_code():
    data = request.get_json(silent=True) or {}
    code = data.get("code", "")
    flatten = bool(data.get("flatten", app.config["PSEUDOASM_FLATTEN"]))
    strict = bool(data.get("strict_targets", app.config["PSEUDOASM_STRICT_TARGETS"]))
    try:
        result = pseudoasm.compile_source(code, flatten=flatten, strict_targets=strict)
    except Exception as e:
        app.logger.exception("compile failed")
        return jsonify({
            "tokens": [],
            "ast": [],
            "assembly": [],
            "errors": [f"Unexpected error: {str(e)}"],
        }), 500

    for err in result['errors']:
        app.logger.warning("%s", err)

    response = {
        "tokens": [
            {"kind": t.kind, "text": t.text, "lineno": t.lineno}
            for t in result['tokens']
        ],
        "ast": [ast_to_dict(a) for a in result['ast']],
        "assembly": result['asm'],
        "errors": result['errors'],
    }
    return jsonify(response)

if __name__ == "__main__":
    app.run(debug=True)
