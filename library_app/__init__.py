from flask import Flask, jsonify, send_from_directory
from flask_swagger_ui import get_swaggerui_blueprint

from library_app.config import Config
from library_app.errors import register_error_handlers, register_jwt_callbacks
from library_app.extensions import db, migrate, jwt, cors, limiter
from library_app.utils.clock import utcnow


def create_app(config_object=Config):
    app = Flask(__name__)
    app.config.from_object(config_object)
    app.logger.setLevel(app.config.get("LOG_LEVEL", "INFO"))

    # 1) Önce db init (db.engine / db.session için şart)
    db.init_app(app)

    # 2) Diğer extension'lar
    migrate.init_app(app, db)
    jwt.init_app(app)
    cors.init_app(app, resources={r"/api/*": {"origins": app.config["CORS_ORIGINS"]}})
    limiter.init_app(app)

    # 3) Hata zarfı (AppError, HTTP, JWT)
    register_error_handlers(app)
    register_jwt_callbacks(jwt)

    # 4) API blueprintleri
    from library_app import models  # noqa: F401  (create_all / migrate için tabloları kaydet)
    from library_app.controllers.auth_controller import auth_bp
    from library_app.controllers.book_controller import book_bp
    from library_app.controllers.borrow_controller import borrow_bp
    from library_app.controllers.user_controller import user_bp
    from library_app.controllers.admin_controller import admin_bp
    app.register_blueprint(auth_bp, url_prefix="/api/auth")
    app.register_blueprint(book_bp, url_prefix="/api/books")
    app.register_blueprint(borrow_bp, url_prefix="/api/books")
    app.register_blueprint(user_bp, url_prefix="/api/users")
    app.register_blueprint(admin_bp, url_prefix="/api/admin")

    # 5) API dokümantasyonu
    @app.get("/openapi.yaml")
    def openapi_yaml():
        return send_from_directory(app.root_path, "openapi.yaml", mimetype="text/yaml")

    swagger_url = app.config["SWAGGER_URL"]
    swaggerui_bp = get_swaggerui_blueprint(swagger_url, "/openapi.yaml", config={"app_name": "Library Management API"})
    app.register_blueprint(swaggerui_bp, url_prefix=swagger_url)

    @app.get("/health")
    def health():
        return jsonify({
            "success": True,
            "message": "Library Management API is running!",
            "timestamp": utcnow().isoformat() + "Z",
        })

    from library_app.commands import register_commands
    register_commands(app)

    return app
