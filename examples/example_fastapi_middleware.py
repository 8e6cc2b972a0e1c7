"""
FastAPI middleware integration example with subrouter.

One FastAPI app serves three sites. Each subdomain is rewritten to its own
path prefix, with the visitor's locale kept in front.

Usage:
    pip install subrouter
    SUBROUTER_CONFIG=examples/subrouter.yml python examples/example_fastapi_middleware.py

    # Then try:
    curl -H "Host: fuga.localhost" http://127.0.0.1:8000/about
    curl -H "Host: piyo.localhost" -H "Accept-Language: ja" http://127.0.0.1:8000/
"""

import uvicorn
from fastapi import FastAPI, Request

from subrouter import SubrouterMiddleware

app = FastAPI(title="My App with subrouter")

# Routes and locales come from subrouter.yml / SUBROUTER_CONFIG
app.add_middleware(SubrouterMiddleware)


@app.get("/{locale}/hoge/{page:path}")
async def main_site(locale: str, page: str, request: Request):
    """Base domain pages"""
    return {"site": "hoge", "locale": locale, "page": page or "index"}


@app.get("/{locale}/fuga/{page:path}")
async def fuga_site(locale: str, page: str):
    """fuga.<domain> pages"""
    return {"site": "fuga", "locale": locale, "page": page or "index"}


@app.get("/{locale}/piyo/{page:path}")
async def piyo_site(locale: str, page: str, request: Request):
    """piyo.<domain> pages"""
    info = request.scope.get("subrouter", {})
    return {"site": "piyo", "locale": locale, "page": page or "index", "requested": info.get("original_path")}


@app.get("/api/health")
async def health():
    """Excluded from rewriting"""
    return {"status": "ok"}


if __name__ == "__main__":
    uvicorn.run(app, host="127.0.0.1", port=8000)
