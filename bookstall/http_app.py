"""
Flask HTTP surface for the storefront
"""
import logging
from flask import Flask, Response, jsonify, request
import structlog

from bookstall.errors import ValidationRejected
from bookstall.storefront import (
    AddToCart,
    CategoryChanged,
    CloseCheckout,
    CountryChanged,
    OpenCheckout,
    PlaceOrder,
    RemoveFromCart,
    SearchChanged,
    SetQuantity,
    Storefront,
    UnknownItem,
)


logger = structlog.get_logger()


def create_app(storefront: Storefront) -> Flask:
    """
    Create Flask app exposing storefront intents as JSON endpoints
    
    Args:
        storefront: Storefront session served by this process
        
    Returns:
        Configured Flask application
    """
    app = Flask(__name__)
    
    # Disable Flask's default request logger to avoid duplicate logs
    logging.getLogger('werkzeug').setLevel(logging.WARNING)
    
    @app.errorhandler(ValidationRejected)
    def rejected(e):
        return jsonify({"error": str(e)}), 400
    
    @app.errorhandler(UnknownItem)
    def unknown_item(e):
        return jsonify({"error": f"Unknown item: {e}"}), 404
    
    @app.route('/healthz', methods=['GET'])
    def healthz():
        """
        Health check
        
        Returns:
            200 when the catalog loaded, 503 when the feed failed
        """
        if storefront.catalog.error:
            logger.error("Health check failed: catalog feed unavailable")
            return Response(
                "unhealthy: catalog feed unavailable",
                status=503,
                mimetype='text/plain'
            )
        return Response("healthy", status=200, mimetype='text/plain')
    
    @app.route('/books', methods=['GET'])
    def books():
        if 'q' in request.args:
            storefront.dispatch(SearchChanged(request.args.get('q', '')))
        if 'category' in request.args:
            storefront.dispatch(CategoryChanged(request.args.get('category', '')))
        return jsonify(storefront.grid_state())
    
    @app.route('/books/refresh', methods=['POST'])
    def refresh_books():
        storefront.refresh()
        return jsonify(storefront.grid_state())
    
    @app.route('/categories', methods=['GET'])
    def categories():
        return jsonify({"categories": storefront.category_options()})
    
    @app.route('/cart', methods=['GET'])
    def cart():
        return jsonify(storefront.cart_state())
    
    @app.route('/cart/items', methods=['POST'])
    def add_to_cart():
        body = request.get_json(silent=True) or {}
        storefront.dispatch(AddToCart(str(body.get('id', ''))))
        return jsonify(storefront.cart_state()), 201
    
    @app.route('/cart/items/<path:identity>', methods=['PATCH'])
    def set_quantity(identity):
        body = request.get_json(silent=True) or {}
        storefront.dispatch(SetQuantity(identity, body.get('qty')))
        return jsonify(storefront.cart_state())
    
    @app.route('/cart/items/<path:identity>', methods=['DELETE'])
    def remove_from_cart(identity):
        storefront.dispatch(RemoveFromCart(identity))
        return jsonify(storefront.cart_state())
    
    @app.route('/checkout', methods=['GET'])
    def checkout_state():
        return jsonify(storefront.checkout_state())
    
    @app.route('/checkout', methods=['POST'])
    def open_checkout():
        storefront.dispatch(OpenCheckout())
        return jsonify(storefront.checkout_state())
    
    @app.route('/checkout/country', methods=['PUT'])
    def change_country():
        body = request.get_json(silent=True) or {}
        storefront.dispatch(CountryChanged(body.get('country', '')))
        return jsonify(storefront.checkout_state())
    
    @app.route('/checkout/order', methods=['POST'])
    def place_order():
        body = request.get_json(silent=True) or {}
        result = storefront.dispatch(PlaceOrder(
            name=body.get('name', ''),
            email=body.get('email', ''),
            address=body.get('address', ''),
            country=body.get('country', ''),
        ))
        payload = storefront.checkout_state()
        payload["order_id"] = result.order_id
        payload["payment_method"] = result.payment_method.value if result.payment_method else None
        return jsonify(payload)
    
    @app.route('/checkout/payment-link', methods=['GET'])
    def payment_link():
        return jsonify({
            "link": storefront.checkout.payment_link(),
            "upi_id": storefront.checkout.copy_payment_id(),
        })
    
    @app.route('/checkout', methods=['DELETE'])
    def close_checkout():
        storefront.dispatch(CloseCheckout())
        return jsonify(storefront.checkout_state())
    
    logger.info("Flask storefront app created")
    return app
