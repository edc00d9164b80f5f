#!/usr/bin/env python3

import os, sys, json, logging, argparse

from httperrors import HttpClientError
from httprequest import Request

DEFAULT_URL_ENV = 'HTTP_CLIENT_URL'

def configure_logging(verbose):
    logging.basicConfig(level=logging.DEBUG if verbose else logging.WARNING,
                        format='%(asctime)s %(name)s %(levelname)s: %(message)s')

def print_response(response):
    print(f"Status Code: {response.status}")
    print(json.dumps(response.body, indent=2, ensure_ascii=False))

def http_get(url):
    """GET a JSON document and print it"""
    try:
        response = Request(url).get()
    except HttpClientError as e:
        print(f"Error: {e}")
        return None
    print_response(response)
    return response

def main(argv=None):
    parser = argparse.ArgumentParser(description="HTTP GET client")
    parser.add_argument('--url', default=os.environ.get(DEFAULT_URL_ENV),
                        help=f'URL to fetch (default: ${DEFAULT_URL_ENV})')
    parser.add_argument('-v', '--verbose', action='store_true', help='Log request/response details')
    args = parser.parse_args(argv)
    if not args.url:
        parser.error(f"--url is required when {DEFAULT_URL_ENV} is not set")

    configure_logging(args.verbose)
    return 0 if http_get(args.url) else 1

if __name__ == "__main__":
    sys.exit(main())
