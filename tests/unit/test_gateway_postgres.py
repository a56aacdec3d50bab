from __future__ import annotations

import pytest

import elastic_ops.db.batch_insert as bi
import elastic_ops.db.postgres as pg
from elastic_ops.db.gateway import GatewayError
from elastic_ops.db.postgres import PostgresGateway


class DummyCursor:
    def __init__(self, conn: DummyConnection) -> None:
        self.conn = conn
        self.description = [("id",), ("product_code",)]
        self.rowcount = 0
        self.closed = False

    def execute(self, sql, params=None):
        if self.conn.fail_with is not None:
            raise self.conn.fail_with
        self.conn.executed.append((sql, list(params or [])))
        self.rowcount = len(self.conn.result)

    def fetchall(self):
        return list(self.conn.result)

    def close(self):
        self.closed = True


class DummyConnection:
    def __init__(self) -> None:
        self.executed: list[tuple[str, list]] = []
        self.result: list[tuple] = []
        self.fail_with: Exception | None = None
        self.commits = 0
        self.rollbacks = 0
        self.closed = False

    def cursor(self):
        return DummyCursor(self)

    def commit(self):
        self.commits += 1

    def rollback(self):
        self.rollbacks += 1

    def close(self):
        self.closed = True


@pytest.fixture()
def conn() -> DummyConnection:
    return DummyConnection()


@pytest.fixture()
def gateway(conn) -> PostgresGateway:
    return PostgresGateway(conn)


@pytest.fixture(autouse=True)
def patch_execute_values(monkeypatch):
    def fake_execute_values(cursor, sql, values, page_size=1000, fetch=False):
        cursor.execute(sql, [v for row in values for v in row])
        return [("id-1", values[0][0])] if fetch else None

    monkeypatch.setattr(bi, "execute_values", fake_execute_values)


def test_insert_returns_stored_rows_and_commits(gateway, conn):
    rows = gateway.insert("products", [{"product_code": "E-20"}])
    assert rows == [{"id": "id-1", "product_code": "E-20"}]
    assert conn.executed[0][0] == 'INSERT INTO "products" ("product_code") VALUES %s RETURNING *'
    assert conn.commits == 1


def test_insert_nothing(gateway, conn):
    assert gateway.insert("products", []) == []
    assert conn.executed == []


def test_select_builds_where_and_order(gateway, conn):
    conn.result = [("1", "A"), ("2", "B")]
    rows = gateway.select("products", filters={"color": "Red"}, order_by="product_code", descending=True)
    sql, params = conn.executed[0]
    assert sql == 'SELECT * FROM "products" WHERE "color" = %s ORDER BY "product_code" DESC'
    assert params == ["Red"]
    assert rows == [{"id": "1", "product_code": "A"}, {"id": "2", "product_code": "B"}]


def test_update_returning(gateway, conn):
    conn.result = [("1", "B")]
    rows = gateway.update("products", {"product_code": "B"}, filters={"id": "1"})
    sql, params = conn.executed[0]
    assert sql == 'UPDATE "products" SET "product_code" = %s WHERE "id" = %s RETURNING *'
    assert params == ["B", "1"]
    assert rows[0]["product_code"] == "B"


def test_delete_returns_rowcount(gateway, conn):
    conn.result = [("x",), ("y",)]
    assert gateway.delete("loading_paper_items", filters={"paper_id": "p"}) == 2
    assert conn.executed[0][0] == 'DELETE FROM "loading_paper_items" WHERE "paper_id" = %s'


def test_delete_requires_filters(gateway, conn):
    with pytest.raises(GatewayError, match="refusing"):
        gateway.delete("products", filters={})
    assert conn.executed == []


def test_failure_rolls_back_and_wraps(gateway, conn):
    conn.fail_with = RuntimeError('relation "products" does not exist')
    with pytest.raises(GatewayError, match="select products"):
        gateway.select("products")
    assert conn.rollbacks == 1
    assert conn.commits == 0


def test_bad_identifier_is_gateway_error(gateway, conn):
    with pytest.raises(GatewayError):
        gateway.select("products", order_by="code; drop")
    with pytest.raises(GatewayError):
        gateway.delete("products", filters={"id = 1 or 1": 1})
    assert conn.executed == []


def test_connect_failure(monkeypatch):
    def refuse(dsn):
        raise RuntimeError("could not connect to server")

    monkeypatch.setattr(pg.psycopg2, "connect", refuse)
    with pytest.raises(GatewayError, match="connection failed"):
        PostgresGateway.connect("host=nowhere")


def test_close(gateway, conn):
    gateway.close()
    assert conn.closed
