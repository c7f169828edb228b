from dotenv import load_dotenv
from .errors import register_error_handlers
from flask import Flask
from .config import Config
from .extensions import db, migrate, jwt, ma, mail
from flasgger import Swagger
from .swagger_config import swagger_template
from .middleware.request_id import init_logging, init_request_id
from .services.access_policy import AccessPolicy
from .services.aggregation import AggregationEngine
from .services.credentials import CredentialService
from .services.link_manager import LinkManager
from .services.secret_store import RedisSecretStore

load_dotenv()

def create_app(config_class=Config, secret_store=None) -> Flask:
    app = Flask(__name__)
    app.config.from_object(config_class)
    init_logging(app)
    Swagger(app, template=swagger_template(app))
    # Extensions
    db.init_app(app)
    migrate.init_app(app, db)
    jwt.init_app(app)
    ma.init_app(app)
    mail.init_app(app)

    # Services, with their collaborators injected
    if secret_store is None:
        secret_store = RedisSecretStore.from_url(app.config["REDIS_URL"])
    policy = AccessPolicy(secret_store)
    app.extensions["secret_store"] = secret_store
    app.extensions["access_policy"] = policy
    app.extensions["link_manager"] = LinkManager(
        secret_store, policy, secret_code_ttl_seconds=app.config["SECRET_CODE_TTL_SECONDS"]
    )
    app.extensions["credentials"] = CredentialService(
        app.config["PASSWORD_HASH_METHOD"],
        reset_token_ttl_seconds=app.config["RESET_TOKEN_TTL_SECONDS"],
    )
    app.extensions["aggregation"] = AggregationEngine()

    # Middleware + errors
    init_request_id(app)
    register_error_handlers(app)

    # Blueprint imports
    from .api.auth.routes import auth_bp
    from .api.users.routes import users_bp
    from .api.content.routes import content_bp
    from .api.elements.routes import elements_bp
    from .api.links.routes import links_bp
    from .api.link_access.routes import link_access_bp
    from .api.participate.routes import participate_bp
    from .api.analytics.routes import analytics_bp
    from .api.dashboard.routes import dashboard_bp

    # Blueprints
    app.register_blueprint(auth_bp, url_prefix="/api/auth")
    app.register_blueprint(users_bp, url_prefix="/api/users")
    app.register_blueprint(content_bp, url_prefix="/api/content")
    app.register_blueprint(elements_bp, url_prefix="/api/content-elements")
    app.register_blueprint(links_bp, url_prefix="/api/links")
    app.register_blueprint(participate_bp, url_prefix="/api/participate")
    app.register_blueprint(analytics_bp, url_prefix="/api/content-analytics")
    app.register_blueprint(dashboard_bp, url_prefix="/api/dashboard")
    # Public share links live outside /api
    app.register_blueprint(link_access_bp, url_prefix="/content")

    # Health check
    @app.get("/health")
    def health():
        return {"status": "ok"}, 200

    return app
