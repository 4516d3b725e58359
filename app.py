# app.py
import os
import io
import csv
import logging
from datetime import date
from flask import Flask, current_app, jsonify, redirect, request, send_file

from auth import DEFAULT_PROVIDER, SupabaseAuth
from exceptions import AuthenticationError, ExportError, ValidationError
from logging_config import setup_logging
from maintenance_store import MaintenanceStore
from models import db
from pdf_export import export_filename, group_by_property, render_pdf, table_rows, TABLE_HEADER
from persistence import DEFAULT_STORAGE_KEY, SqlStorage, StatePersister
import storage
import validation
import views

logger = logging.getLogger(__name__)


def get_store() -> MaintenanceStore:
    return current_app.extensions["maintenance_store"]


def get_auth():
    return current_app.extensions.get("auth")


def _event_payload(event) -> dict:
    payload = event.to_dict()
    payload["photoUrl"] = storage.photo_url(event.photo) if event.photo else None
    return payload


def _not_found():
    return jsonify({"error": "not_found"}), 404


def create_app(test_config=None):
    app = Flask(__name__)
    app.secret_key = os.getenv("SECRET_KEY", "dev-secret-change-me")

    # Local dev fallback: SQLite
    app.config["SQLALCHEMY_DATABASE_URI"] = os.getenv("DATABASE_URL", "sqlite:///app.db")
    app.config["SQLALCHEMY_TRACK_MODIFICATIONS"] = False
    app.config["STORAGE_KEY"] = os.getenv("STORAGE_KEY", DEFAULT_STORAGE_KEY)
    app.config["SUPABASE_URL"] = os.getenv("SUPABASE_URL", "")
    app.config["SUPABASE_ANON_KEY"] = os.getenv("SUPABASE_ANON_KEY", "")
    app.config["AUTH_REDIRECT_URL"] = os.getenv("AUTH_REDIRECT_URL", "")
    app.config["PDF_ENGINE"] = os.getenv("PDF_ENGINE", "xelatex")
    app.config["LOG_LEVEL"] = os.getenv("LOG_LEVEL", "INFO")
    app.config["LOG_FORMAT"] = os.getenv("LOG_FORMAT", "text")

    if test_config:
        app.config.update(test_config)

    if not app.testing:
        setup_logging(app.config["LOG_LEVEL"], app.config["LOG_FORMAT"])

    db.init_app(app)

    with app.app_context():
        db.create_all()
        persister = StatePersister(SqlStorage(), app.config["STORAGE_KEY"])
        app.extensions["maintenance_store"] = MaintenanceStore.load(persister)

    auth = app.config.get("AUTH_GATEWAY")
    if auth is None and app.config["SUPABASE_URL"] and app.config["SUPABASE_ANON_KEY"]:
        auth = SupabaseAuth.from_settings(app.config["SUPABASE_URL"], app.config["SUPABASE_ANON_KEY"])
    app.extensions["auth"] = auth

    # --------------------
    # Errors
    # --------------------

    @app.errorhandler(ValidationError)
    def handle_validation_error(e: ValidationError):
        return jsonify({"error": "validation_error", "message": str(e), "fields": e.fields}), 400

    @app.errorhandler(ExportError)
    def handle_export_error(e: ExportError):
        return jsonify({"error": "export_failed", "message": str(e)}), 500

    @app.errorhandler(AuthenticationError)
    def handle_auth_error(e: AuthenticationError):
        return jsonify({"error": "authentication_failed", "message": str(e)}), 401

    # --------------------
    # Dashboard
    # --------------------

    @app.get("/")
    def home():
        store = get_store()
        events = views.filter_by_property(store.maintenance_events, store.selected_property_id)
        return jsonify({
            "selectedPropertyId": store.selected_property_id,
            "upcoming": [_event_payload(e) for e in views.upcoming_events(events)],
            "recent": [_event_payload(e) for e in views.recent_events(events)],
            "unreadNotifications": views.unread_count(store.notifications),
        })

    # --------------------
    # Properties
    # --------------------

    @app.get("/api/properties")
    def list_properties():
        store = get_store()
        events = store.maintenance_events
        return jsonify([
            {**p.to_dict(), "maintenanceCount": views.event_count_for_property(events, p.id)}
            for p in store.properties
        ])

    @app.post("/api/properties")
    def create_property():
        prop = get_store().create_property(validation.property_fields(request.get_json(silent=True)))
        return jsonify(prop.to_dict()), 201

    @app.patch("/api/properties/<property_id>")
    def update_property(property_id: str):
        store = get_store()
        store.update_property(property_id, validation.property_fields(request.get_json(silent=True), partial=True))
        prop = store.get_property(property_id)
        if prop is None:
            return _not_found()
        return jsonify(prop.to_dict())

    @app.delete("/api/properties/<property_id>")
    def delete_property(property_id: str):
        store = get_store()
        for event in views.filter_by_property(store.maintenance_events, property_id):
            storage.discard_photo(event.photo)
        store.delete_property(property_id)
        return jsonify({"deleted": property_id})

    @app.post("/api/selection")
    def select_property():
        store = get_store()
        property_id = validation.selection(request.get_json(silent=True))
        if property_id is not None and store.get_property(property_id) is None:
            return _not_found()
        store.select_property(property_id)
        return jsonify({"selectedPropertyId": store.selected_property_id})

    # --------------------
    # Maintenance events
    # --------------------

    @app.get("/api/maintenance")
    def list_maintenance():
        store = get_store()
        property_id = request.args.get("propertyId") or store.selected_property_id
        events = views.maintenance_history(
            store.maintenance_events,
            property_id=property_id,
            term=request.args.get("q"),
            category=validation.history_category(request.args.get("category")),
            order=request.args.get("sort", views.SORT_NEWEST),
        )
        return jsonify([_event_payload(e) for e in events])

    @app.post("/api/maintenance")
    def create_maintenance():
        store = get_store()
        fields = validation.maintenance_fields(request.get_json(silent=True))
        if store.get_property(fields["property_id"]) is None:
            raise ValidationError("unknown property", ["propertyId"])

        event = store.create_maintenance_event(fields)
        return jsonify(_event_payload(event)), 201

    @app.get("/api/maintenance/<event_id>")
    def maintenance_detail(event_id: str):
        event = get_store().get_maintenance_event(event_id)
        if event is None:
            return _not_found()
        return jsonify(_event_payload(event))

    @app.patch("/api/maintenance/<event_id>")
    def update_maintenance(event_id: str):
        store = get_store()
        fields = validation.maintenance_fields(request.get_json(silent=True), partial=True)
        if "property_id" in fields and store.get_property(fields["property_id"]) is None:
            raise ValidationError("unknown property", ["propertyId"])

        store.update_maintenance_event(event_id, fields)
        event = store.get_maintenance_event(event_id)
        if event is None:
            return _not_found()
        return jsonify(_event_payload(event))

    @app.delete("/api/maintenance/<event_id>")
    def delete_maintenance(event_id: str):
        store = get_store()
        event = store.get_maintenance_event(event_id)
        if event is not None:
            storage.discard_photo(event.photo)
        store.delete_maintenance_event(event_id)
        return jsonify({"deleted": event_id})

    @app.post("/api/maintenance/<event_id>/photo")
    def upload_photo(event_id: str):
        store = get_store()
        event = store.get_maintenance_event(event_id)
        if event is None:
            return _not_found()

        upload = request.files.get("photo")
        if upload is None or not upload.filename:
            raise ValidationError("missing_fields", ["photo"])

        reference = storage.store_photo(
            upload.read(), upload.mimetype or "application/octet-stream", upload.filename, event_id
        )
        storage.discard_photo(event.photo)
        store.update_maintenance_event(event_id, {"photo": reference})
        return jsonify(_event_payload(store.get_maintenance_event(event_id)))

    # --------------------
    # Notifications
    # --------------------

    @app.get("/api/notifications")
    def list_notifications():
        store = get_store()
        names = views.property_names(store.properties)
        return jsonify([
            {**n.to_dict(), "propertyName": names.get(n.property_id)}
            for n in views.sorted_notifications(store.notifications)
        ])

    @app.post("/api/notifications/<notification_id>/read")
    def read_notification(notification_id: str):
        store = get_store()
        store.mark_notification_as_read(notification_id)
        notification = store.get_notification(notification_id)
        if notification is None:
            return _not_found()
        return jsonify(notification.to_dict())

    @app.delete("/api/notifications/<notification_id>")
    def delete_notification(notification_id: str):
        get_store().delete_notification(notification_id)
        return jsonify({"deleted": notification_id})

    # --------------------
    # Export
    # --------------------

    def _export_selection():
        store = get_store()
        wanted = request.args.getlist("propertyId")
        properties = [p for p in store.properties if not wanted or p.id in wanted]
        ids = {p.id for p in properties}
        events = [e for e in store.maintenance_events if e.property_id in ids]
        return properties, events

    @app.get("/export/pdf")
    def download_pdf():
        properties, events = _export_selection()
        if not properties:
            raise ValidationError("Vyberte alespoň jednu nemovitost.", ["propertyId"])

        data = render_pdf(
            events,
            properties,
            include_photos=request.args.get("includePhotos", type=int, default=0) == 1,
            pdf_engine=current_app.config["PDF_ENGINE"],
        )
        return send_file(
            io.BytesIO(data),
            mimetype="application/pdf",
            as_attachment=True,
            download_name=export_filename(properties),
        )

    @app.get("/export/csv")
    def download_csv():
        properties, events = _export_selection()

        output = io.StringIO()
        writer = csv.writer(output)
        writer.writerow(["Nemovitost", *TABLE_HEADER])
        for prop, group in group_by_property(events, properties):
            for row in table_rows(group):
                writer.writerow([prop.name, *row])

        mem = io.BytesIO(output.getvalue().encode("utf-8"))
        filename = f"udrzba_nemovitosti_{date.today().isoformat()}.csv"
        return send_file(mem, mimetype="text/csv", as_attachment=True, download_name=filename)

    # --------------------
    # Auth
    # --------------------

    def _auth_or_503():
        auth = get_auth()
        if auth is None:
            return None, (jsonify({"error": "auth_not_configured"}), 503)
        return auth, None

    @app.get("/auth/me")
    def whoami():
        auth, error = _auth_or_503()
        if error:
            return error
        user = auth.current_user()
        return jsonify({"user": user.to_dict() if user else None})

    @app.post("/auth/sign-in")
    def sign_in():
        auth, error = _auth_or_503()
        if error:
            return error
        email, password = validation.credentials(request.get_json(silent=True))
        user = auth.sign_in(email, password)
        return jsonify({"user": user.to_dict()})

    @app.post("/auth/sign-up")
    def sign_up():
        auth, error = _auth_or_503()
        if error:
            return error
        email, password = validation.credentials(request.get_json(silent=True))
        user = auth.sign_up(email, password)
        return jsonify({"user": user.to_dict() if user else None, "confirmationRequired": user is None}), 201

    @app.get("/auth/provider/<provider>")
    def sign_in_with_provider(provider: str):
        auth, error = _auth_or_503()
        if error:
            return error
        redirect_to = current_app.config["AUTH_REDIRECT_URL"] or request.host_url.rstrip("/") + "/auth/callback"
        return redirect(auth.sign_in_with_provider(provider or DEFAULT_PROVIDER, redirect_to))

    @app.get("/auth/callback")
    def auth_callback():
        auth, error = _auth_or_503()
        if error:
            return error
        user = auth.complete_sign_in(request.args.get("code"))
        if user is None:
            raise AuthenticationError("Přihlášení se nepodařilo dokončit.")
        return redirect("/")

    @app.post("/auth/sign-out")
    def sign_out():
        auth, error = _auth_or_503()
        if error:
            return error
        auth.sign_out()
        return jsonify({"user": None})

    return app


if __name__ == "__main__":
    create_app().run(host="127.0.0.1", port=5050, debug=True)
