# handlers/health_handler.py
"""
Handler for health check requests
"""
import time

from flask import jsonify


class HealthHandler:
    @staticmethod
    def handle_health():
        return jsonify({"ok": True, "timestamp": int(time.time() * 1000)})
