from flask import Flask, g, jsonify

from examples.firebase_demo.app_config import auth, cookie_auth


def create_app() -> Flask:
    """
    Create and configure the Flask application with Firebase ID token auth.

    Returns:
        Flask: Configured Flask application instance
    """
    app = Flask(__name__)
    auth.init_app(app)

    @app.get("/api/me")
    @auth.require()
    def me():
        """Return the authenticated Firebase user."""
        return jsonify(
            {"uid": g.firebase_token["uid"], "email": g.firebase_token.get("email")}
        ), 200

    @app.post("/api/account/delete")
    @auth.require(check_revoked=True)
    def delete_account():
        """Sensitive action: also reject tokens revoked since issuance."""
        return jsonify({"status": "scheduled", "uid": g.firebase_token["uid"]}), 202

    @app.get("/dashboard")
    @cookie_auth.require()
    def dashboard():
        return jsonify({"uid": g.firebase_token["uid"]}), 200

    @app.errorhandler(401)
    def unauthorized(error):
        """Handle unauthorized access errors."""
        return jsonify(
            {
                "status": "denied",
                "message": error.description,
                "authenticated": False,
            }
        ), 401

    @app.errorhandler(500)
    def internal_error(error):
        """Handle internal server errors."""
        return jsonify(
            {
                "status": "error",
                "message": "An unexpected error occurred. Please try again later.",
            }
        ), 500

    return app
