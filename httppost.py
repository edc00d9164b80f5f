#!/usr/bin/env python3

import os, sys, json, argparse

from httperrors import HttpClientError
from httpget import DEFAULT_URL_ENV, configure_logging, print_response
from httprequest import Request

def http_post(url, payload):
    """POST a JSON payload and print the JSON reply"""
    try:
        response = Request(url).post(payload)
    except HttpClientError as e:
        print(f"Error: {e}")
        return None
    print_response(response)
    return response

def load_payload(args):
    """Payload from --json, --json-file, or key=value fields"""
    if args.json is not None:
        return json.loads(args.json)
    if args.json_file:
        with open(args.json_file, encoding='utf-8') as f:
            return json.load(f)
    payload = {}
    for p in args.field or []:
        if '=' in p:
            k, v = p.split('=', 1)
            payload[k] = v
    return payload

def main(argv=None):
    parser = argparse.ArgumentParser(description="HTTP POST client")
    parser.add_argument('--url', default=os.environ.get(DEFAULT_URL_ENV),
                        help=f'URL to send POST request to (default: ${DEFAULT_URL_ENV})')
    source = parser.add_mutually_exclusive_group()
    source.add_argument('--json', help='JSON data to send (as string)')
    source.add_argument('--json-file', help='File holding the JSON data to send')
    source.add_argument('--field', nargs='*', help='Object fields (key=value), sent as strings')
    parser.add_argument('-v', '--verbose', action='store_true', help='Log request/response details')
    args = parser.parse_args(argv)
    if not args.url:
        parser.error(f"--url is required when {DEFAULT_URL_ENV} is not set")

    try:
        payload = load_payload(args)
    except (OSError, json.JSONDecodeError) as e:
        print(f"Error: invalid payload: {e}")
        return 1

    configure_logging(args.verbose)
    return 0 if http_post(args.url, payload) else 1

if __name__ == "__main__":
    sys.exit(main())
