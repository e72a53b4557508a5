from flask import current_app, jsonify
from pagebuilder.domain.exceptions import DomainError

def register_error_handlers(app):
    @app.errorhandler(DomainError)
    def handle_domain_error(error):
        current_app.logger.info("%s: %s", error.code, error.message)
        response = jsonify(error.to_dict())
        response.status_code = error.status_code
        return response
