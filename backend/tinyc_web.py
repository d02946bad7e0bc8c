from flask import Flask, request, jsonify
from flask_cors import CORS
import tinyc

app = Flask(__name__)
app.config.from_mapping(OPTIMIZE=True)
app.config.from_prefixed_env("TINYC")
CORS(app)  # allow cross-origin requests


def ast_to_dict(node):
    """
    Serialize AST to dict recursively
    """
    if node is None:
        return None
    d = {"type": type(node).__name__}
    if isinstance(node, tinyc.Program):
        d["statements"] = [ast_to_dict(s) for s in node.stmts]
    elif isinstance(node, tinyc.Assign):
        d["name"] = node.dest
        d["expr"] = ast_to_dict(node.src)
    elif isinstance(node, tinyc.Print):
        d["expr"] = ast_to_dict(node.src)
    elif isinstance(node, tinyc.Plus):
        d["left"] = ast_to_dict(node.left)
        d["right"] = ast_to_dict(node.right)
    elif isinstance(node, tinyc.Num):
        d["value"] = node.value
    elif isinstance(node, tinyc.Var):
        d["name"] = node.id
    return d


def _valid_inputs(inputs):
    if inputs is None:
        return True
    return isinstance(inputs, list) and all(
        isinstance(v, int) and not isinstance(v, bool) for v in inputs
    )


def _empty_response(errors):
    return {
        "tokens": [],
        "ast": {},
        "symbols": [],
        "tac": [],
        "optimized_tac": [],
        "assembly": [],
        "output": [],
        "errors": errors,
    }


@app.route("/compile", methods=["POST"])
def compile_code():
    data = request.get_json(silent=True) or {}
    code = data.get("code", "")
    opt = bool(data.get("optimize", app.config["OPTIMIZE"]))
    inputs = data.get("inputs")
    if not _valid_inputs(inputs):
        return jsonify(_empty_response(["Request error: inputs must be a list of integers"])), 400
    try:
        result = tinyc.compile_source(code, opt=opt, inputs=inputs)
    except Exception as e:
        app.logger.exception("compile failed")
        return jsonify(_empty_response([f"Unexpected error: {e}"])), 500

    response = {
        "tokens": [
            {"type": t.type, "value": t.value, "lineno": t.lineno}
            for t in result['tokens']
        ],
        "ast": ast_to_dict(result['ast']) if result['ast'] else {},
        "symbols": result['symbols'],
        "tac": [str(t) for t in result['tac']],
        "optimized_tac": [str(t) for t in result['optimized_tac']],
        "assembly": result['asm'].splitlines(),
        "output": result['output'],
        "errors": [str(e) for e in result['errors']],
    }
    return jsonify(response)


if __name__ == "__main__":
    app.run(debug=True)
