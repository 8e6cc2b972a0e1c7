"""Main entry point for subrouter CLI"""

import argparse
import asyncio
import json
import sys
from dataclasses import asdict
from pathlib import Path

from . import __version__
from .config import SubrouterConfig, find_config_file, load_config, read_config_file, validate_config
from .errors import ConfigurationError
from .factory import create_app
from .router.decisions import PassThrough, RouteRequest
from .router.utils import derive_base_domain, load_base_domain
from .structured_logging import setup_logging
from .utils import console, msg_error, msg_info, msg_success, msg_warning, print_decision, print_routes


def handle_check(args) -> bool:
    """Handle subrouter check - validate the configuration file"""
    path = Path(args.config) if args.config else find_config_file()
    if path is None:
        msg_warning("No subrouter.yml, subrouter.yaml or subrouter.json found; defaults apply")
        return True

    try:
        data = read_config_file(path)
    except ConfigurationError as e:
        msg_error(str(e))
        return False

    is_valid, errors = validate_config(data)
    if not is_valid:
        msg_error(f"{path} is invalid:")
        for error in errors:
            console.print(f"  - {error}", markup=False, highlight=False, soft_wrap=True)
        return False

    config = SubrouterConfig.from_dict(data)
    msg_success(f"{path} is valid ({len(config.routes)} route(s), {len(config.locales)} locale(s))")
    return True


def handle_routes(args, config: SubrouterConfig) -> bool:
    """Handle subrouter routes - list the route table"""
    table = config.build_route_table()
    if args.json:
        print(json.dumps({"routes": table.to_list(), "locales": config.locales}, indent=2))
        return True

    if not len(table):
        msg_info("No routes configured")
        return True

    base_domain = args.domain or load_base_domain() or "localhost"
    print_routes(table, base_domain)
    if config.locales:
        default_locale = config.default_locale or config.locales[0]
        msg_info(f"Locales: {', '.join(config.locales)} (default: {default_locale}, prefix: {config.locale_prefix})")
    return True


def handle_resolve(args, config: SubrouterConfig) -> bool:
    """Handle subrouter resolve - show the decision for one request"""
    path, _, query = args.path.partition("?")
    headers = {"host": args.host}
    if args.accept_language:
        headers["accept-language"] = args.accept_language
    if args.cookie:
        headers["cookie"] = args.cookie

    request = RouteRequest(path=path or "/", host=args.host, headers=headers, query_string=query, request_id="cli")
    router = config.build_router()
    matcher = config.build_matcher()

    excluded = not matcher.matches(request.path)
    decision = PassThrough() if excluded else asyncio.run(router.handle(request))
    subdomain = router.subdomain_for(request)

    if args.json:
        payload = {
            "host": args.host,
            "request_path": request.path,
            "subdomain": subdomain,
            "excluded": excluded,
            "action": decision.action,
            "decision": asdict(decision),
        }
        print(json.dumps(payload, indent=2))
        return True

    if excluded:
        msg_info(f"{request.path} is excluded from routing")
    print_decision(decision, args.host, request.path, subdomain)
    return True


def handle_serve(args, config: SubrouterConfig) -> bool:
    """Handle subrouter serve - run the demo app with uvicorn"""
    import uvicorn

    app = create_app(config)
    base_domain = derive_base_domain(f"{args.host}:{args.port}")
    msg_info(f"Serving on http://{base_domain} ({len(config.routes)} route(s))")
    uvicorn.run(app, host=args.host, port=args.port, log_level=args.log_level)
    return True


def main(argv=None):
    """Main CLI entry point"""
    parser = argparse.ArgumentParser(
        description="subrouter - Subdomain and locale request rewriting",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument("--version", action="version", version=f"subrouter {__version__}")
    parser.add_argument("--config", "-c", help="Path to subrouter.yml / subrouter.json")
    parser.add_argument("--debug", action="store_true", help="Log every routing decision")

    subparsers = parser.add_subparsers(dest="command", help="Command to execute")

    # check command
    subparsers.add_parser("check", help="Validate the configuration file")

    # routes command
    routes_parser = subparsers.add_parser("routes", help="List configured routes")
    routes_parser.add_argument("--json", action="store_true", help="Output as JSON")
    routes_parser.add_argument("--domain", help="Base domain used for example hosts")

    # resolve command
    resolve_parser = subparsers.add_parser("resolve", help="Show how one request would be routed")
    resolve_parser.add_argument("path", help="Request path, optionally with ?query")
    resolve_parser.add_argument("--host", required=True, help="Host header (e.g. fuga.example.com)")
    resolve_parser.add_argument("--accept-language", help="Accept-Language header")
    resolve_parser.add_argument("--cookie", help="Cookie header")
    resolve_parser.add_argument("--json", action="store_true", help="Output as JSON")

    # serve command
    serve_parser = subparsers.add_parser("serve", help="Run the demo app")
    serve_parser.add_argument("--host", default="127.0.0.1", help="Bind address (default: 127.0.0.1)")
    serve_parser.add_argument("--port", type=int, default=8000, help="Bind port (default: 8000)")
    serve_parser.add_argument("--log-level", default="info", help="uvicorn log level (default: info)")

    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 0

    setup_logging(level="DEBUG" if args.debug else None)

    try:
        if args.command == "check":
            success = handle_check(args)
        else:
            config = load_config(args.config)
            if args.debug:
                config.debug = True

            if args.command == "routes":
                success = handle_routes(args, config)
            elif args.command == "resolve":
                success = handle_resolve(args, config)
            elif args.command == "serve":
                success = handle_serve(args, config)
            else:
                parser.print_help()
                return 1

        return 0 if success else 1

    except ConfigurationError as e:
        msg_error(str(e))
        return 1
    except KeyboardInterrupt:
        print("\nInterrupted")
        return 130


if __name__ == "__main__":
    sys.exit(main())
