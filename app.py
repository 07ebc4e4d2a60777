"""
Currency tier editor service.

A JSON API over one TierStore: add, edit, delete and reorder tiers, and
preview what an amount in one tier is worth in every other tier.
"""
import logging
from typing import Any, Dict, Optional

from flask import Flask, abort, jsonify, request

from coinage.config import Settings, configure_logging, load_settings
from coinage.models.tier import CurrencyTier, RECORD_RATE_KEY
from coinage.systems.conversion import convert_all
from coinage.systems.tier_store import DuplicateTierError, TierStore
from coinage.systems.validation import TierForm, coerce_number, validate_tier_form, validate_tiers

logger = logging.getLogger(__name__)

# Form field -> key used in request and response bodies
FIELD_KEYS = {"name": "name", "conversion_to_next": RECORD_RATE_KEY}


def format_amount(amount: float, places: int = 2) -> str:
    """Fixed-point display string for a converted amount."""
    return f"{amount:.{places}f}"


def _json_body() -> Dict[str, Any]:
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def _submitted_fields(data: Dict[str, Any]) -> list:
    fields = []
    if "name" in data:
        fields.append("name")
    if RECORD_RATE_KEY in data or "conversion_to_next" in data:
        fields.append("conversion_to_next")
    return fields


def _form_errors_response(errors: Dict[str, str]):
    body = {"errors": {FIELD_KEYS[f]: message for f, message in errors.items()}}
    return jsonify(body), 400


def _index_arg(data: Dict[str, Any], key: str) -> int:
    value = data.get(key)
    if isinstance(value, bool) or not isinstance(value, int):
        abort(400, description=f"{key} must be an integer")
    return value


def create_app(store: Optional[TierStore] = None, settings: Optional[Settings] = None) -> Flask:
    """
    Build the service around an explicit TierStore.

    Args:
        store: The ladder to edit. A new empty one is created if omitted.
        settings: Service settings. Loaded from the environment if omitted.
    """
    settings = settings or load_settings()
    if store is None:
        store = TierStore()

    app = Flask(__name__)
    app.config["SECRET_KEY"] = settings.secret_key
    app.extensions["tier_store"] = store

    # --- Error handlers ---

    @app.errorhandler(DuplicateTierError)
    def duplicate_tier(e):
        return jsonify({"error": str(e)}), 409

    @app.errorhandler(400)
    def bad_request(e):
        return jsonify({"error": e.description}), 400

    @app.errorhandler(404)
    def not_found(e):
        return jsonify({"error": e.description}), 404

    # --- Tiers ---

    @app.route("/api/tiers", methods=["GET"])
    def list_tiers():
        return jsonify(store.to_list())

    @app.route("/api/tiers", methods=["POST"])
    def add_tier():
        data = _json_body()
        form = TierForm.from_dict(data)
        if "conversion_to_next" not in _submitted_fields(data):
            form.conversion_to_next = settings.default_conversion

        errors = validate_tier_form(form)
        if errors:
            return _form_errors_response(errors)

        tier = CurrencyTier(name=form.name.strip(), conversion_to_next=coerce_number(form.conversion_to_next))
        if data.get("id"):
            tier.id = str(data["id"])
        store.add(tier)

        logger.info(f"[API] Added currency tier {tier.name!r} ({tier.id}) at order {tier.order}")
        return jsonify(tier.to_dict()), 201

    @app.route("/api/tiers/<tier_id>", methods=["PATCH"])
    def edit_tier(tier_id):
        if tier_id not in store:
            abort(404, description=f"Unknown currency tier: {tier_id}")

        data = _json_body()
        fields = _submitted_fields(data)
        form = TierForm.from_dict(data)
        errors = validate_tier_form(form, fields)
        if errors:
            return _form_errors_response(errors)

        partial: Dict[str, Any] = {}
        if "name" in fields:
            partial["name"] = form.name.strip()
        if "conversion_to_next" in fields:
            partial["conversion_to_next"] = coerce_number(form.conversion_to_next)
        store.update(tier_id, partial)

        logger.info(f"[API] Updated currency tier {tier_id}: {sorted(partial)}")
        return jsonify(store.get(tier_id).to_dict())

    @app.route("/api/tiers/<tier_id>", methods=["DELETE"])
    def delete_tier(tier_id):
        if not store.delete(tier_id):
            abort(404, description=f"Unknown currency tier: {tier_id}")
        logger.info(f"[API] Deleted currency tier {tier_id}")
        return "", 204

    @app.route("/api/tiers/reorder", methods=["POST"])
    def reorder_tiers():
        data = _json_body()
        from_index = _index_arg(data, "fromIndex")
        to_index = _index_arg(data, "toIndex")
        store.reorder(from_index, to_index)
        return jsonify(store.to_list())

    @app.route("/api/tiers/<int:index>/up", methods=["POST"])
    def move_tier_up(index):
        store.move_up(index)
        return jsonify(store.to_list())

    @app.route("/api/tiers/<int:index>/down", methods=["POST"])
    def move_tier_down(index):
        store.move_down(index)
        return jsonify(store.to_list())

    # --- Calculator ---

    @app.route("/api/convert", methods=["GET"])
    def convert():
        tiers = store.sorted_view()
        if not tiers:
            return jsonify({"from": None, "amount": None, "conversions": []})

        from_tier_id = request.args.get("from") or tiers[0].id
        amount = coerce_number(request.args.get("amount", 1))
        if amount is None:
            abort(400, description="amount must be a number")
        if from_tier_id not in store:
            abort(404, description=f"Unknown currency tier: {from_tier_id}")

        conversions = convert_all(tiers, from_tier_id, amount)
        return jsonify({
            "from": from_tier_id,
            "amount": amount,
            "conversions": [
                {
                    "tier": tier.to_dict(),
                    "amount": converted,
                    "display": format_amount(converted, settings.display_places),
                }
                for tier, converted in conversions
            ],
        })

    @app.route("/api/validation", methods=["GET"])
    def validation_report():
        return jsonify(validate_tiers(store.sorted_view()).to_dict())

    return app


if __name__ == "__main__":
    settings = load_settings()
    configure_logging(settings)
    app = create_app(settings=settings)
    app.run(host="0.0.0.0", port=settings.port)
