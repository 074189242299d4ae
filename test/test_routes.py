"""
Tests for schema and value routes

Tests the HTTP API end to end against an in-memory database.
"""

import pytest

from custom_fields.routes import API_V1_PREFIX

SCHEMAS = f"{API_V1_PREFIX}/schemas"
VALUES = f"{API_V1_PREFIX}/values"


@pytest.fixture
async def schema_id(client, partner_fields):
    response = await client.post(
        SCHEMAS,
        json={
            "owner_type": "Partner",
            "name": {"en": "Partner Fields", "ar": "حقول الشريك"},
            "field_definitions": partner_fields,
        },
    )
    assert response.status_code == 201
    return response.json()["id"]


class TestSchemaRoutes:
    """Test /schemas endpoints"""

    async def test_create_schema(self, client, schema_id):
        response = await client.get(f"{SCHEMAS}/{schema_id}")

        assert response.status_code == 200
        result = response.json()
        assert result["owner_type"] == "Partner"
        assert result["is_active"] is True
        assert [f["key"] for f in result["field_definitions"]][:2] == ["industry", "priority"]

    async def test_create_duplicate_owner_type(self, client, schema_id):
        response = await client.post(SCHEMAS, json={"owner_type": "Partner", "name": "Again"})

        assert response.status_code == 409
        assert response.json()["error"]["error_code"] == "VALIDATION_DUPLICATE_RESOURCE"

    async def test_create_with_bad_definition(self, client):
        response = await client.post(
            SCHEMAS,
            json={
                "owner_type": "Partner",
                "name": "Partner",
                "field_definitions": [{"key": "priority", "label": "Priority", "type": "select"}],
            },
        )
        assert response.status_code == 400
        assert response.json()["error"]["error_code"] == "VALIDATION_FAILED"

    async def test_create_missing_owner_type(self, client):
        response = await client.post(SCHEMAS, json={"name": "Nameless"})
        assert response.status_code == 422

    async def test_list_schemas(self, client, schema_id):
        await client.post(SCHEMAS, json={"owner_type": "Contact", "name": "Contact", "is_active": False})

        all_schemas = (await client.get(SCHEMAS)).json()
        active = (await client.get(SCHEMAS, params={"active_only": True})).json()

        assert {s["owner_type"] for s in all_schemas} == {"Partner", "Contact"}
        assert [s["owner_type"] for s in active] == ["Partner"]

    async def test_get_missing_schema(self, client):
        response = await client.get(f"{SCHEMAS}/999")

        assert response.status_code == 404
        assert response.json()["error"]["error_code"] == "RESOURCE_SCHEMA_NOT_FOUND"

    async def test_update_schema(self, client, schema_id):
        response = await client.patch(f"{SCHEMAS}/{schema_id}", json={"is_active": False})

        assert response.status_code == 200
        assert response.json()["is_active"] is False
        assert response.json()["name"] == {"en": "Partner Fields", "ar": "حقول الشريك"}

    async def test_clear_description(self, client, schema_id):
        await client.patch(f"{SCHEMAS}/{schema_id}", json={"description": "Partner extras"})

        response = await client.patch(f"{SCHEMAS}/{schema_id}", json={"description": None})

        assert response.status_code == 200
        assert response.json()["description"] is None
        assert response.json()["name"] == {"en": "Partner Fields", "ar": "حقول الشريك"}

    async def test_delete_schema(self, client, schema_id):
        await client.put(f"{VALUES}/Partner/1", json={"values": {"priority": "high"}})

        response = await client.delete(f"{SCHEMAS}/{schema_id}")
        assert response.status_code == 204

        assert (await client.get(f"{SCHEMAS}/{schema_id}")).status_code == 404
        assert (await client.get(f"{VALUES}/Partner/1")).json()["values"] == {}

    async def test_field_types(self, client):
        response = await client.get(f"{SCHEMAS}/field-types")

        assert response.status_code == 200
        types = {t["value"]: t for t in response.json()["field_types"]}
        assert types["text"]["supports_translation"] is True
        assert types["select"]["requires_options"] is True


class TestFieldRoutes:
    """Test /schemas/{id}/fields endpoints"""

    async def test_add_field(self, client, schema_id):
        response = await client.post(
            f"{SCHEMAS}/{schema_id}/fields",
            json={"key": "website", "label": "Website", "type": "text"},
        )

        assert response.status_code == 201
        assert response.json()["field_definitions"][-1]["key"] == "website"

    async def test_add_duplicate_field(self, client, schema_id):
        response = await client.post(
            f"{SCHEMAS}/{schema_id}/fields",
            json={"key": "industry", "label": "Industry", "type": "text"},
        )

        assert response.status_code == 400
        assert response.json()["error"]["message"] == "Field 'industry' already exists in schema"

    async def test_update_field(self, client, schema_id):
        response = await client.put(
            f"{SCHEMAS}/{schema_id}/fields/notes",
            json={"label": "Comments", "type": "textarea", "required": True},
        )

        assert response.status_code == 200
        notes = response.json()["field_definitions"][-1]
        assert notes == {
            "key": "notes",
            "label": "Comments",
            "type": "textarea",
            "required": True,
            "show_in_table": False,
            "validation_rules": [],
        }

    async def test_update_missing_field(self, client, schema_id):
        response = await client.put(
            f"{SCHEMAS}/{schema_id}/fields/missing",
            json={"label": "Missing", "type": "text"},
        )

        assert response.status_code == 404
        assert response.json()["error"]["error_code"] == "RESOURCE_FIELD_NOT_FOUND"

    async def test_remove_field(self, client, schema_id):
        response = await client.delete(f"{SCHEMAS}/{schema_id}/fields/notes")

        assert response.status_code == 200
        assert "notes" not in [f["key"] for f in response.json()["field_definitions"]]

    async def test_reorder_fields(self, client, schema_id):
        order = ["notes", "annual_revenue", "is_preferred", "established_date", "priority", "industry"]
        response = await client.put(f"{SCHEMAS}/{schema_id}/field-order", json={"keys": order})

        assert response.status_code == 200
        assert [f["key"] for f in response.json()["field_definitions"]] == order

    async def test_reorder_incomplete(self, client, schema_id):
        response = await client.put(f"{SCHEMAS}/{schema_id}/field-order", json={"keys": ["notes"]})
        assert response.status_code == 400

    async def test_field_keyed_order_is_updatable(self, client, schema_id):
        await client.post(
            f"{SCHEMAS}/{schema_id}/fields",
            json={"key": "order", "label": "Order", "type": "text"},
        )

        response = await client.put(
            f"{SCHEMAS}/{schema_id}/fields/order",
            json={"label": "Order Number", "type": "text"},
        )

        assert response.status_code == 200
        assert response.json()["field_definitions"][-1]["label"] == "Order Number"


class TestValueRoutes:
    """Test /values endpoints"""

    async def test_set_and_get_values(self, client, schema_id):
        response = await client.put(
            f"{VALUES}/Partner/1",
            json={
                "values": {
                    "industry": {"en": "Technology", "ar": "تقنية"},
                    "priority": "high",
                    "established_date": "2020-01-15",
                    "annual_revenue": 1000000,
                }
            },
        )

        assert response.status_code == 200
        values = response.json()["values"]
        assert values["industry"] == "Technology"
        assert values["established_date"] == "2020-01-15"
        assert values["annual_revenue"] == 1000000.0

    async def test_locale_query(self, client, schema_id):
        await client.put(
            f"{VALUES}/Partner/1",
            json={"values": {"industry": {"en": "Technology", "ar": "تقنية"}, "priority": "high"}},
        )

        response = await client.get(f"{VALUES}/Partner/1", params={"locale": "ar"})

        assert response.json()["locale"] == "ar"
        assert response.json()["values"]["industry"] == "تقنية"

    async def test_accept_language(self, client, schema_id):
        await client.put(
            f"{VALUES}/Partner/1",
            json={"values": {"industry": {"en": "Technology", "ar": "تقنية"}, "priority": "high"}},
        )

        response = await client.get(f"{VALUES}/Partner/1", headers={"Accept-Language": "ar-SA,en;q=0.5"})

        assert response.json()["locale"] == "ar"
        assert response.json()["values"]["industry"] == "تقنية"

    async def test_raw_and_display(self, client, schema_id):
        await client.put(
            f"{VALUES}/Partner/1",
            json={"values": {"industry": {"en": "Technology", "ar": "تقنية"}, "priority": "high"}},
        )

        raw = (await client.get(f"{VALUES}/Partner/1", params={"raw": True})).json()["values"]
        display = (await client.get(f"{VALUES}/Partner/1", params={"display": True, "locale": "ar"})).json()["values"]

        assert raw["industry"] == {"en": "Technology", "ar": "تقنية"}
        assert display["priority"] == "عالية"

    async def test_per_locale_write(self, client, schema_id):
        await client.put(f"{VALUES}/Partner/1", json={"values": {"priority": "low", "industry": "Technology"}})
        await client.put(
            f"{VALUES}/Partner/1",
            json={"values": {"priority": "low", "industry": "تقنية"}, "locale": "ar"},
        )

        raw = (await client.get(f"{VALUES}/Partner/1", params={"raw": True})).json()["values"]
        assert raw["industry"] == {"ar": "تقنية"}

    async def test_invalid_values(self, client, schema_id):
        response = await client.put(f"{VALUES}/Partner/1", json={"values": {"priority": "invalid_option"}})

        assert response.status_code == 400
        error = response.json()["error"]
        assert error["message"] == "Invalid option 'invalid_option' for select field 'priority'."
        assert error["details"]["field"] == "priority"

    async def test_no_schema(self, client):
        response = await client.put(f"{VALUES}/Ghost/1", json={"values": {"anything": 1}})
        assert response.status_code == 404

        response = await client.get(f"{VALUES}/Ghost/1")
        assert response.status_code == 200
        assert response.json()["values"] == {}

    async def test_validate(self, client, schema_id):
        response = await client.post(
            f"{VALUES}/Partner/1/validate",
            json={"values": {"annual_revenue": -5, "color": "red"}},
        )

        assert response.status_code == 200
        result = response.json()
        assert result["is_valid"] is False
        assert result["errors"]["priority"] == ["Custom field 'priority' is required."]
        assert result["errors"]["color"] == ["Custom field 'color' is not defined for this model."]
        assert result["errors"]["annual_revenue"] == ["Custom field 'annual_revenue' must be at least 0."]

        # Nothing was stored
        assert (await client.get(f"{VALUES}/Partner/1")).json()["values"] == {}

    async def test_delete_value_and_values(self, client, schema_id):
        await client.put(f"{VALUES}/Partner/1", json={"values": {"priority": "high", "notes": "n"}})

        assert (await client.delete(f"{VALUES}/Partner/1/notes")).json() == {"deleted": 1}
        assert (await client.delete(f"{VALUES}/Partner/1")).json() == {"deleted": 1}
        assert (await client.get(f"{VALUES}/Partner/1")).json()["values"] == {}
