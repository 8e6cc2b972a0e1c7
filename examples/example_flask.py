"""
Flask integration example with subrouter.

Usage:
    pip install subrouter flask
    python examples/example_flask.py

    # Access:
    # http://admin.localhost:5000/users -> served by /admin/users
    # http://localhost:5000/            -> served by /site/
"""

from flask import Flask, jsonify, request

from subrouter import Route, Subrouter, SubrouterWSGIMiddleware
from subrouter.router.matcher import RequestMatcher

app = Flask(__name__)

router = Subrouter([Route("/admin", "admin"), Route("/site")], debug=True)
app.wsgi_app = SubrouterWSGIMiddleware(app.wsgi_app, router=router, matcher=RequestMatcher())


@app.route("/site/")
@app.route("/site/<path:page>")
def site(page="index"):
    return jsonify({"site": "main", "page": page})


@app.route("/admin/")
@app.route("/admin/<path:page>")
def admin(page="index"):
    return jsonify(
        {
            "site": "admin",
            "page": page,
            "subdomain": request.environ.get("subrouter.subdomain"),
            "requested": request.environ.get("subrouter.original_path"),
        }
    )


if __name__ == "__main__":
    app.run(host="127.0.0.1", port=5000, debug=True)
