"""
Staffing Forms API - Flask Application Entry Point

This module initializes the Flask application, configures middleware, and
wires the business contract form services for agencies, businesses and
workers.
"""

import os
from datetime import datetime, timezone
from flask import jsonify
from flask_openapi3 import OpenAPI, Info, Tag
from observability.config import setup_observability, SERVICE_NAME
from observability.middleware import add_observability_middleware

from middleware.error_handler import ErrorHandlerMiddleware, register_custom_error_handlers
from middleware.validation import ValidationMiddleware
from middleware.auth import AuthMiddleware
from services.hal import create_hal_formatter
from services.mongodb import MongoDBService
from services.auth import AuthService
from services.linker import FormOwnerLinker
from services.forms import FormService

# Initialize observability first
setup_observability()

BASE_URL = os.getenv('BASE_URL', 'http://localhost:5000')
DOCS_ENABLED = os.getenv('DOCS_ENABLED', 'true').lower() == 'true'

# OpenAPI info
info = Info(
    title="Staffing Forms API",
    version="1.0.0",
    description="Business contract forms shared between agencies, businesses and workers"
)

tags = [
    Tag(name="BusinessContractForms", description="Business contract form management"),
    Tag(name="Health", description="System health")
]

security_schemes = {
    "jwt": {"type": "http", "scheme": "bearer", "bearerFormat": "JWT"}
}

# Request models are validated by flask-openapi3; failures become 400 problem documents
validation_middleware = ValidationMiddleware(BASE_URL)

app = OpenAPI(
    __name__,
    info=info,
    security_schemes=security_schemes,
    doc_ui=DOCS_ENABLED,
    validation_error_status=ValidationMiddleware.status_code,
    validation_error_callback=validation_middleware.validation_error_response
)

# Add observability middleware
add_observability_middleware(app)

# Environment configuration
app.config['ENVIRONMENT'] = os.getenv('ENVIRONMENT', 'development')
app.config['DEBUG'] = app.config['ENVIRONMENT'] == 'development'
app.config['DOCS_ENABLED'] = DOCS_ENABLED

# Security configuration
app.config['JWT_SECRET_KEY'] = os.getenv('JWT_SECRET', 'dev-secret-key')
app.config['JWT_ALGORITHM'] = os.getenv('JWT_ALGORITHM', 'HS256')
app.config['JWT_ACCESS_TOKEN_EXPIRES'] = int(os.getenv('JWT_ACCESS_TOKEN_EXPIRES', '900'))

# Database configuration
app.config['MONGODB_URI'] = os.getenv('MONGODB_URI', 'mongodb://localhost:27017/staffing_forms_dev')
app.config['MONGODB_DATABASE'] = os.getenv('MONGODB_DATABASE', 'staffing_forms_dev')

# Feature flags
app.config['OTEL_ENABLED'] = os.getenv('OTEL_ENABLED', 'true').lower() == 'true'

# API configuration
app.config['BASE_URL'] = BASE_URL

if app.config['ENVIRONMENT'] == 'production' and not os.getenv('JWT_SECRET'):
    raise RuntimeError("JWT_SECRET must be set in production")

# Initialize services
mongodb_service = MongoDBService(app.config['MONGODB_URI'], app.config['MONGODB_DATABASE'])
auth_service = AuthService(
    app.config['JWT_SECRET_KEY'],
    app.config['JWT_ALGORITHM'],
    app.config['JWT_ACCESS_TOKEN_EXPIRES']
)
form_service = FormService(mongodb_service, FormOwnerLinker(mongodb_service))

# Initialize middleware
hal_formatter = create_hal_formatter(app.config['BASE_URL'])
auth_middleware = AuthMiddleware(auth_service, hal_formatter)
error_handler = ErrorHandlerMiddleware(app, app.config['BASE_URL'])

# Register custom error handlers
register_custom_error_handlers(app, hal_formatter)

# Make services available to routes
app.mongodb_service = mongodb_service
app.auth_service = auth_service
app.form_service = form_service
app.hal_formatter = hal_formatter
app.validation_middleware = validation_middleware
app.auth_middleware = auth_middleware

# Register routes
from routes.forms import forms_bp

app.register_api(forms_bp)


@app.get('/api/healthz', tags=[tags[1]])
def health_check():
    """Health check endpoint reporting document store connectivity."""
    mongodb_health = app.mongodb_service.health_check()
    status = 'healthy' if mongodb_health.get('status') == 'healthy' else 'unhealthy'

    health_data = {
        "status": status,
        "service": SERVICE_NAME,
        "version": os.getenv('SERVICE_VERSION', '1.0.0'),
        "environment": app.config['ENVIRONMENT'],
        "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
        "dependencies": {
            "mongodb": mongodb_health
        },
        "_links": {
            "self": hal_formatter.builder.link_builder.build_self_link('/api/healthz').model_dump(exclude_none=True),
            "forms": hal_formatter.builder.link_builder.build_collection_link('/forms').model_dump(exclude_none=True)
        }
    }

    return jsonify(health_data), 200 if status == 'healthy' else 503


if __name__ == '__main__':
    # Development server
    app.run(
        host='0.0.0.0',
        port=int(os.getenv('PORT', 5000)),
        debug=app.config['DEBUG']
    )
