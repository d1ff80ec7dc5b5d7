"""
Flask demo protected by S3O authentication.

Usage:
    # Install dependencies
    pip install -e ".[flask]"

    # Run the server
    flask --app examples.flask_demo run --port 8010

    # Or directly
    python examples/flask_demo.py

Environment variables:
    S3O_PROVIDER_URL - Override provider URL (default: https://s3o.ft.com)
    S3O_PUBLIC_KEY_URL - Override public key URL (default: https://s3o.ft.com/publickey)
"""

import logging

from flask import Flask, jsonify, request

# Import from installed package
from s3o_gate import GateConfig, PublicKeyFetcher
from s3o_gate.middleware import S3OWSGIMiddleware

logging.basicConfig(level=logging.DEBUG)

# Configuration from environment
CONFIG = GateConfig.from_env()

keys = PublicKeyFetcher.from_config(CONFIG)
keys.refresh_sync()

app = Flask(__name__)

# Wrap with S3O middleware
app.wsgi_app = S3OWSGIMiddleware(app.wsgi_app, key_source=keys, config=CONFIG)


@app.route("/")
def root():
    """Greets the logged in user."""
    return jsonify({
        "service": "S3O Flask Demo",
        "user": request.environ.get("s3o_gate.username"),
    })


@app.route("/refresh-key", methods=["POST"])
def refresh_key():
    """Re-download the provider's public key."""
    return jsonify({"refreshed": keys.refresh_sync()})


if __name__ == "__main__":
    app.run(host="0.0.0.0", port=8010, debug=True)
