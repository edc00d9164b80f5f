#!/usr/bin/env python3

from flask import Flask, request, jsonify

app = Flask(__name__)

# In-memory store (simple dict instead of a database)
items = {}

@app.route('/')
def home():
    return jsonify({'service': 'local JSON server', 'endpoints': ['/test', '/items', '/status/<code>']})

@app.route('/test', methods=['GET', 'POST'])
def test():
    if request.method == 'POST':
        payload = request.get_json(force=True, silent=True)
        return jsonify({'received': payload, 'length': request.content_length or 0})
    return jsonify({'test': 'hello'})

@app.route('/items', methods=['GET', 'POST'])
def item_collection():
    if request.method == 'POST':
        payload = request.get_json(force=True, silent=True)
        if not isinstance(payload, dict) or 'name' not in payload:
            return jsonify({'error': 'name is required'}), 400
        item_id = len(items) + 1
        items[item_id] = payload
        return jsonify({'id': item_id, **payload}), 201
    return jsonify([{'id': k, **v} for k, v in items.items()])

@app.route('/items/<int:item_id>')
def item_detail(item_id):
    if item_id not in items:
        return jsonify({'error': 'not found'}), 404
    return jsonify({'id': item_id, **items[item_id]})

@app.route('/status/<int:code>')
def status(code):
    return jsonify({'status': code}), code

@app.route('/big')
def big():
    # Body size tunable to hit read-buffer boundaries
    size = request.args.get('size', default=4096, type=int)
    return jsonify({'data': 'x' * size})

if __name__ == '__main__':
    print("Starting local JSON server on http://localhost:8000")
    app.run(host='0.0.0.0', port=8000, debug=True)
