from decimal import Decimal

from sqlalchemy.exc import OperationalError

from conftest import login
from models.log import Log
from models.order import Order, OrderItem
from models.users import User
from utils.errors import PersistenceError

XHR = {"X-Requested-With": "XMLHttpRequest"}


def _add(client, product_id, quantity="1"):
    return client.post(f"/cart/add/{product_id}", data={"quantity": quantity}, follow_redirects=False)


def _update_json(client, product_id, quantity):
    return client.post(f"/cart/update/{product_id}", json={"quantity": quantity}, headers=XHR)


# --- catalog ---

def test_index_lists_products(client, products):
    response = client.get("/")
    assert response.status_code == 200
    assert "Widget" in response.text
    assert "9.99" in response.text
    assert "Gadget" in response.text


# --- registration / login ---

def test_register_then_login(client, db):
    response = client.post(
        "/register",
        data={"nombre": "Ana", "email": "ana@example.com", "password": "secret123"},
        follow_redirects=False,
    )
    assert response.status_code == 303
    assert response.headers["location"] == "/login"
    assert db.query(User).filter(User.email == "ana@example.com").count() == 1

    response = login(client)
    assert response.status_code == 303
    assert response.headers["location"] == "/"
    assert "Hola, Ana" in client.get("/").text


def test_register_missing_fields_keeps_input(client, db):
    response = client.post("/register", data={"nombre": "Ana", "email": "", "password": "x"})
    assert response.status_code == 400
    assert "Todos los campos son obligatorios." in response.text
    assert 'value="Ana"' in response.text
    assert db.query(User).count() == 0


def test_register_duplicate_email(client, db, user):
    response = client.post(
        "/register", data={"nombre": "Otra", "email": "ana@example.com", "password": "pw"}
    )
    assert response.status_code == 400
    assert "Ese correo ya está registrado." in response.text
    assert db.query(User).count() == 1
    assert db.query(Log).filter(Log.action == "REGISTER", Log.status == "FAIL").count() == 1


def test_login_failures_share_one_message(client, user):
    wrong_password = login(client, password="bad")
    unknown_email = login(client, email="nobody@example.com")
    assert wrong_password.status_code == unknown_email.status_code == 401
    assert "Correo o contraseña incorrectos." in wrong_password.text
    assert "Correo o contraseña incorrectos." in unknown_email.text


def test_login_never_logs_password(client, db, user):
    login(client)
    login(client, password="bad-password")
    for entry in db.query(Log).all():
        assert "secret123" not in str(entry.meta)
        assert "bad-password" not in str(entry.meta)


def test_logout_clears_identity_and_cart(logged_in, products):
    _add(logged_in, products[0].id)
    response = logged_in.get("/logout", follow_redirects=False)
    assert response.status_code == 303

    assert logged_in.get("/orders/history", follow_redirects=False).headers["location"] == "/login"
    assert "Tu carrito está vacío." in logged_in.get("/cart").text


# --- cart ---

def test_cart_starts_empty(client):
    response = client.get("/cart")
    assert response.status_code == 200
    assert "Tu carrito está vacío." in response.text


def test_add_accumulates_and_update_sets(client, products):
    widget = products[0]
    response = _add(client, widget.id, "2")
    assert response.status_code == 303
    assert response.headers["location"] == "/cart"
    assert "19.98" in client.get("/cart").text

    _add(client, widget.id, "1")
    assert _update_json(client, widget.id, 3).json() == {"totalQty": 3, "totalPrice": 29.97}

    assert _update_json(client, widget.id, 5).json() == {"totalQty": 5, "totalPrice": 49.95}


def test_add_invalid_quantity_adds_one(client, products):
    _add(client, products[0].id, "abc")
    assert _update_json(client, 999, 1).json() == {"totalQty": 1, "totalPrice": 9.99}


def test_add_unknown_product_redirects_home(client, products):
    response = _add(client, 999)
    assert response.headers["location"] == "/"
    response = _add(client, "not-a-number")
    assert response.headers["location"] == "/"
    assert "Tu carrito está vacío." in client.get("/cart").text


def test_update_to_zero_or_garbage_removes(client, products):
    widget, gadget = products
    _add(client, widget.id, "2")
    _add(client, gadget.id, "1")

    assert _update_json(client, widget.id, 0).json() == {"totalQty": 1, "totalPrice": 5.5}
    assert _update_json(client, gadget.id, "zz").json() == {"totalQty": 0, "totalPrice": 0.0}


def test_update_form_post_redirects(client, products):
    _add(client, products[0].id, "2")
    response = client.post(f"/cart/update/{products[0].id}", data={"quantity": "4"}, follow_redirects=False)
    assert response.status_code == 303
    assert response.headers["location"] == "/cart"
    assert "39.96" in client.get("/cart").text


def test_remove_item_and_missing_item(client, products):
    _add(client, products[0].id, "2")
    response = client.post(f"/cart/remove/{products[1].id}", follow_redirects=False)
    assert response.status_code == 303
    assert "19.98" in client.get("/cart").text

    client.post(f"/cart/remove/{products[0].id}")
    assert "Tu carrito está vacío." in client.get("/cart").text


# --- checkout / history / tickets ---

def test_checkout_requires_login(client, products, db):
    _add(client, products[0].id)
    response = client.post("/cart/checkout", follow_redirects=False)
    assert response.status_code == 303
    assert response.headers["location"] == "/login"
    assert db.query(Order).count() == 0


def test_checkout_empty_cart_creates_nothing(logged_in, db):
    response = logged_in.post("/cart/checkout", follow_redirects=False)
    assert response.headers["location"] == "/cart"
    assert db.query(Order).count() == 0


def test_full_purchase_flow(logged_in, db, user, products):
    widget = products[0]
    _add(logged_in, widget.id, "2")
    _update_json(logged_in, widget.id, 5)

    response = logged_in.post("/cart/checkout", follow_redirects=False)
    assert response.status_code == 303
    order = db.query(Order).one()
    assert response.headers["location"] == f"/orders/{order.id}/ticket"
    assert order.user_id == user.id
    assert order.total == Decimal("49.95")
    items = db.query(OrderItem).all()
    assert [(i.product_id, i.quantity, i.price) for i in items] == [(widget.id, 5, Decimal("9.99"))]

    assert "Tu carrito está vacío." in logged_in.get("/cart").text

    ticket = logged_in.get(f"/orders/{order.id}/ticket")
    assert ticket.status_code == 200
    assert "Ticket de compra" in ticket.text
    assert "49.95" in ticket.text
    assert "ana@example.com" in ticket.text

    history = logged_in.get("/orders/history")
    assert f"/orders/{order.id}/ticket" in history.text

    assert db.query(Log).filter(Log.action == "ORDER_CREATE").count() == 1


def test_checkout_failure_keeps_cart(logged_in, db, products, monkeypatch):
    import routes.cart

    def broken_checkout(*args, **kwargs):
        raise PersistenceError()

    monkeypatch.setattr(routes.cart, "create_order", broken_checkout)
    _add(logged_in, products[0].id, "2")

    response = logged_in.post("/cart/checkout", follow_redirects=False)
    assert response.headers["location"] == "/cart"
    page = logged_in.get("/cart").text
    assert PersistenceError.message in page
    assert "19.98" in page
    assert db.query(Order).count() == 0


def test_history_and_tickets_require_login(client):
    for url in ("/orders/history", "/orders/1/ticket", "/orders/1/ticket/pdf"):
        response = client.get(url, follow_redirects=False)
        assert response.status_code == 303
        assert response.headers["location"] == "/login"


def test_ticket_pdf_download(logged_in, products, db):
    _add(logged_in, products[0].id, "2")
    logged_in.post("/cart/checkout")
    order = db.query(Order).one()

    response = logged_in.get(f"/orders/{order.id}/ticket/pdf")
    assert response.status_code == 200
    assert response.headers["content-type"] == "application/pdf"
    assert response.headers["content-disposition"] == f'attachment; filename="ticket_{order.id}.pdf"'
    assert response.content.startswith(b"%PDF")


def test_foreign_ticket_is_not_found(client, db, user, other_user, products):
    login(client)
    _add(client, products[0].id)
    client.post("/cart/checkout")
    order = db.query(Order).one()
    client.get("/logout")

    login(client, email="beto@example.com")
    html = client.get(f"/orders/{order.id}/ticket")
    assert html.status_code == 404
    assert "Orden no encontrada." in html.text
    assert "ana@example.com" not in html.text

    pdf = client.get(f"/orders/{order.id}/ticket/pdf")
    assert pdf.status_code == 404
    assert pdf.headers["content-type"].startswith("text/html")


def test_bad_order_id_redirects_to_history(logged_in):
    response = logged_in.get("/orders/abc/ticket", follow_redirects=False)
    assert response.status_code == 303
    assert response.headers["location"] == "/orders/history"


# --- cart state across requests ---

def test_cart_changes_survive_between_requests(client, products):
    widget, gadget = products
    _add(client, widget.id, "2")
    _add(client, gadget.id, "1")

    client.post(f"/cart/update/{widget.id}", data={"quantity": "3"})
    client.post(f"/cart/remove/{gadget.id}")

    assert _update_json(client, 999, 1).json() == {"totalQty": 3, "totalPrice": 29.97}
    page = client.get("/cart").text
    assert "Gadget" not in page
    assert "29.97" in page


def test_second_checkout_does_not_duplicate_order(logged_in, db, products):
    _add(logged_in, products[0].id, "2")

    first = logged_in.post("/cart/checkout", follow_redirects=False)
    assert first.headers["location"].startswith("/orders/")

    second = logged_in.post("/cart/checkout", follow_redirects=False)
    assert second.headers["location"] == "/cart"
    assert db.query(Order).count() == 1
    assert db.query(OrderItem).count() == 1
    assert "Tu carrito está vacío." in logged_in.get("/cart").text


def test_add_without_quantity_field_adds_one(client, products):
    response = client.post(f"/cart/add/{products[0].id}", follow_redirects=False)
    assert response.headers["location"] == "/cart"
    assert _update_json(client, 999, 1).json() == {"totalQty": 1, "totalPrice": 9.99}


def test_add_shows_generic_error_when_catalog_lookup_fails(client, products, monkeypatch):
    import routes.cart

    def broken_lookup(db, product_id):
        raise OperationalError("SELECT products", {}, Exception("database is locked"))

    monkeypatch.setattr(routes.cart, "get_product", broken_lookup)
    response = _add(client, products[0].id)

    assert response.status_code == 500
    assert PersistenceError.message in response.text
    assert "OperationalError" not in response.text
    monkeypatch.undo()
    assert "Tu carrito está vacío." in client.get("/cart").text
