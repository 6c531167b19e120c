"""Tests for InvoiceService."""
import pytest
from datetime import date, datetime
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock
from bson import Decimal128, ObjectId

USER_ID = str(ObjectId())
MONDAY = date(2025, 1, 6)


def _mock_db():
    """Mock database with one AsyncMock per collection."""
    collections = {
        "invoice_settings": AsyncMock(),
        "invoice_templates": AsyncMock(),
        "users": AsyncMock(),
        "timesheets": AsyncMock(),
    }
    mock_db = MagicMock()
    mock_db.__getitem__.side_effect = lambda key: collections[key]
    return mock_db, collections


def _cursor(docs):
    cursor = MagicMock()
    cursor.to_list = AsyncMock(return_value=docs)
    return cursor


def _settings_doc():
    now = datetime.utcnow()
    return {
        "_id": ObjectId(),
        "user_id": USER_ID,
        "contractor_name": "Casey Contractor",
        "abn": "12 345 678 901",
        "bank_bsb": "062-000",
        "bank_account": "1234 5678",
        "address_line1": "1 George St",
        "address_line2": None,
        "city": "Sydney",
        "state": "NSW",
        "postcode": "2000",
        "created_at": now,
        "updated_at": now,
    }


def _template_doc(name="Acme", day_rate="1250", gst="0.1", **extra):
    now = datetime.utcnow()
    doc = {
        "_id": ObjectId(),
        "user_id": USER_ID,
        "template_name": name,
        "client_name": f"{name} Pty Ltd",
        "day_rate": Decimal128(day_rate),
        "gst_percentage": Decimal128(gst),
        "is_active": True,
        "created_at": now,
        "updated_at": now,
    }
    doc.update(extra)
    return doc


def _week_doc(workdays=5):
    days = {}
    for index, name in enumerate(("mon", "tue", "wed", "thu", "fri", "sat", "sun")):
        worked = index < workdays
        days[name] = {
            "date": "",
            "start": "08:30" if worked else None,
            "break_hours": 0,
            "break_minutes": 30 if worked else 0,
            "finish": "17:00" if worked else None,
            "total": "0:00",
        }
    return {"user_id": USER_ID, "week_start": datetime(2025, 1, 6), "days": days}


@pytest.mark.asyncio
class TestInvoiceServiceSettings:
    """Tests for contractor settings."""

    async def test_get_settings_missing(self):
        """Test None when settings were never saved."""
        from timesheet_service.services.invoice_service import InvoiceService

        mock_db, collections = _mock_db()
        collections["invoice_settings"].find_one.return_value = None

        service = InvoiceService(mock_db)

        assert await service.get_settings(USER_ID) is None

    async def test_upsert_settings(self):
        """Test settings are upserted by user."""
        from timesheet_service.models.invoice import ContractorSettingsUpdate
        from timesheet_service.services.invoice_service import InvoiceService

        mock_db, collections = _mock_db()
        collections["invoice_settings"].find_one_and_update.return_value = _settings_doc()

        service = InvoiceService(mock_db)
        update = ContractorSettingsUpdate(**{
            key: value for key, value in _settings_doc().items()
            if key not in ("_id", "user_id", "created_at", "updated_at")
        })
        settings = await service.upsert_settings(USER_ID, update)

        assert settings.abn == "12 345 678 901"

        args, kwargs = collections["invoice_settings"].find_one_and_update.call_args
        assert args[0] == {"user_id": USER_ID}
        assert args[1]["$set"]["contractor_name"] == "Casey Contractor"
        assert kwargs["upsert"] is True


@pytest.mark.asyncio
class TestInvoiceServiceTemplates:
    """Tests for invoice templates."""

    async def test_list_templates_default_first(self):
        """Test templates are ordered default first then by name."""
        from timesheet_service.services.invoice_service import InvoiceService

        mock_db, collections = _mock_db()
        zeta = _template_doc("Zeta")
        alpha = _template_doc("Alpha")
        mu = _template_doc("Mu")
        collections["users"].find_one.return_value = {"default_template_id": str(mu["_id"])}
        collections["invoice_templates"].find = MagicMock(return_value=_cursor([zeta, alpha, mu]))

        service = InvoiceService(mock_db)
        templates = await service.list_templates(USER_ID)

        assert [t.template_name for t in templates] == ["Mu", "Alpha", "Zeta"]
        assert [t.is_default for t in templates] == [True, False, False]
        assert templates[1].day_rate == Decimal("1250")

        query = collections["invoice_templates"].find.call_args.args[0]
        assert query == {"user_id": USER_ID, "is_active": True}

    async def test_create_default_template(self):
        """Test creating a default template points the user at it."""
        from timesheet_service.models.invoice import InvoiceTemplateCreate
        from timesheet_service.services.invoice_service import InvoiceService

        mock_db, collections = _mock_db()
        inserted_id = ObjectId()
        collections["invoice_templates"].insert_one.return_value = MagicMock(inserted_id=inserted_id)

        service = InvoiceService(mock_db)
        template = await service.create_template(
            USER_ID,
            InvoiceTemplateCreate(
                template_name="Acme",
                client_name="Acme Pty Ltd",
                day_rate=Decimal("1250"),
                is_default=True,
            ),
        )

        assert template.id == str(inserted_id)
        assert template.is_default is True

        stored = collections["invoice_templates"].insert_one.call_args.args[0]
        assert "is_default" not in stored
        assert stored["day_rate"] == Decimal128("1250")

        args = collections["users"].update_one.call_args.args
        assert args[0] == {"_id": ObjectId(USER_ID)}
        assert args[1]["$set"]["default_template_id"] == str(inserted_id)

    async def test_create_non_default_template(self):
        """Test a non-default template leaves the default alone."""
        from timesheet_service.models.invoice import InvoiceTemplateCreate
        from timesheet_service.services.invoice_service import InvoiceService

        mock_db, collections = _mock_db()
        collections["invoice_templates"].insert_one.return_value = MagicMock(inserted_id=ObjectId())
        collections["users"].find_one.return_value = {"default_template_id": "other"}

        service = InvoiceService(mock_db)
        template = await service.create_template(
            USER_ID,
            InvoiceTemplateCreate(template_name="B", client_name="B Ltd", day_rate=Decimal("900")),
        )

        assert template.is_default is False
        collections["users"].update_one.assert_not_called()

    async def test_update_template_sets_default(self):
        """Test making a template default is a single user update."""
        from timesheet_service.models.invoice import InvoiceTemplateUpdate
        from timesheet_service.services.invoice_service import InvoiceService

        mock_db, collections = _mock_db()
        doc = _template_doc()
        template_id = str(doc["_id"])
        collections["invoice_templates"].find_one.return_value = doc
        collections["invoice_templates"].find_one_and_update.return_value = dict(
            doc, day_rate=Decimal128("1300")
        )
        collections["users"].find_one.return_value = {"default_template_id": template_id}

        service = InvoiceService(mock_db)
        template = await service.update_template(
            USER_ID,
            template_id,
            InvoiceTemplateUpdate(day_rate=Decimal("1300"), is_default=True),
        )

        assert template.day_rate == Decimal("1300")
        assert template.is_default is True

        set_doc = collections["invoice_templates"].find_one_and_update.call_args.args[1]["$set"]
        assert set_doc["day_rate"] == Decimal128("1300")
        assert "is_default" not in set_doc
        assert "template_name" not in set_doc

        user_update = collections["users"].update_one.call_args.args
        assert user_update[1]["$set"]["default_template_id"] == template_id

    async def test_update_template_unset_default(self):
        """Test clearing the default only touches a matching user."""
        from timesheet_service.models.invoice import InvoiceTemplateUpdate
        from timesheet_service.services.invoice_service import InvoiceService

        mock_db, collections = _mock_db()
        doc = _template_doc()
        template_id = str(doc["_id"])
        collections["invoice_templates"].find_one.return_value = doc
        collections["invoice_templates"].find_one_and_update.return_value = doc
        collections["users"].find_one.return_value = {"default_template_id": None}

        service = InvoiceService(mock_db)
        template = await service.update_template(
            USER_ID, template_id, InvoiceTemplateUpdate(is_default=False)
        )

        assert template.is_default is False
        query = collections["users"].update_one.call_args.args[0]
        assert query == {"_id": ObjectId(USER_ID), "default_template_id": template_id}

    async def test_update_template_not_found(self):
        """Test updating a missing template fails."""
        from timesheet_service.models.invoice import InvoiceTemplateUpdate
        from timesheet_service.services.invoice_service import InvoiceService

        mock_db, collections = _mock_db()
        collections["invoice_templates"].find_one.return_value = None

        service = InvoiceService(mock_db)

        with pytest.raises(ValueError, match="Template not found"):
            await service.update_template(USER_ID, str(ObjectId()), InvoiceTemplateUpdate())

    async def test_update_template_deleted_concurrently(self):
        """Test a template removed between lookup and update is not found."""
        from timesheet_service.models.invoice import InvoiceTemplateUpdate
        from timesheet_service.services.invoice_service import InvoiceService

        mock_db, collections = _mock_db()
        doc = _template_doc()
        collections["invoice_templates"].find_one.return_value = doc
        collections["invoice_templates"].find_one_and_update.return_value = None

        service = InvoiceService(mock_db)

        with pytest.raises(ValueError, match="Template not found"):
            await service.update_template(
                USER_ID, str(doc["_id"]), InvoiceTemplateUpdate(is_default=True)
            )

        collections["users"].update_one.assert_not_called()

    async def test_get_template_invalid_id(self):
        """Test malformed template IDs are treated as not found."""
        from timesheet_service.services.invoice_service import InvoiceService

        mock_db, _ = _mock_db()
        service = InvoiceService(mock_db)

        with pytest.raises(ValueError, match="Template not found"):
            await service.get_template(USER_ID, "nope")

    async def test_delete_template_clears_default(self):
        """Test deleting a template clears it as the default."""
        from timesheet_service.services.invoice_service import InvoiceService

        mock_db, collections = _mock_db()
        doc = _template_doc()
        template_id = str(doc["_id"])
        collections["invoice_templates"].find_one.return_value = doc
        collections["invoice_templates"].delete_one.return_value = MagicMock(deleted_count=1)

        service = InvoiceService(mock_db)
        result = await service.delete_template(USER_ID, template_id)

        assert result == {"deleted_count": 1}
        query = collections["users"].update_one.call_args.args[0]
        assert query["default_template_id"] == template_id


@pytest.mark.asyncio
class TestInvoiceServiceBuildInvoice:
    """Tests for building invoices."""

    async def test_build_invoice(self):
        """Test a full week invoiced with the default template."""
        from timesheet_service.services.invoice_service import InvoiceService

        mock_db, collections = _mock_db()
        default = _template_doc("Default Co", day_rate="1250")
        other = _template_doc("Another", day_rate="500")
        collections["invoice_settings"].find_one.return_value = _settings_doc()
        collections["users"].find_one.return_value = {"default_template_id": str(default["_id"])}
        collections["invoice_templates"].find = MagicMock(return_value=_cursor([other, default]))
        collections["timesheets"].find_one.return_value = _week_doc()

        service = InvoiceService(mock_db)
        invoice = await service.build_invoice(USER_ID, MONDAY, now=datetime(2025, 1, 13))

        assert invoice.template_name == "Default Co"
        assert invoice.subtotal == Decimal("6250.00")
        assert invoice.gst_amount == Decimal("625.00")
        assert invoice.total == Decimal("6875.00")
        assert invoice.invoice_number.startswith("250113")
        assert invoice.week_ending_display == "12 Jan"

    async def test_build_invoice_with_requested_template(self):
        """Test an explicitly requested template is used."""
        from timesheet_service.services.invoice_service import InvoiceService

        mock_db, collections = _mock_db()
        default = _template_doc("Default Co", day_rate="1250")
        other = _template_doc("Another", day_rate="500")
        collections["invoice_settings"].find_one.return_value = _settings_doc()
        collections["users"].find_one.return_value = {"default_template_id": str(default["_id"])}
        collections["invoice_templates"].find = MagicMock(return_value=_cursor([other, default]))
        collections["timesheets"].find_one.return_value = _week_doc(workdays=2)

        service = InvoiceService(mock_db)
        invoice = await service.build_invoice(USER_ID, MONDAY, template_id=str(other["_id"]))

        assert invoice.template_name == "Another"
        assert invoice.subtotal == Decimal("1000.00")

    async def test_build_invoice_missing_settings(self):
        """Test invoices need contractor settings."""
        from timesheet_service.errors import MissingSettingsError
        from timesheet_service.services.invoice_service import InvoiceService

        mock_db, collections = _mock_db()
        collections["invoice_settings"].find_one.return_value = None

        service = InvoiceService(mock_db)

        with pytest.raises(MissingSettingsError):
            await service.build_invoice(USER_ID, MONDAY)

    async def test_build_invoice_missing_template(self):
        """Test invoices need an active template."""
        from timesheet_service.errors import MissingTemplateError
        from timesheet_service.services.invoice_service import InvoiceService

        mock_db, collections = _mock_db()
        collections["invoice_settings"].find_one.return_value = _settings_doc()
        collections["users"].find_one.return_value = {"default_template_id": None}
        collections["invoice_templates"].find = MagicMock(return_value=_cursor([]))

        service = InvoiceService(mock_db)

        with pytest.raises(MissingTemplateError):
            await service.build_invoice(USER_ID, MONDAY)

    async def test_build_invoice_unsaved_week(self):
        """Test a week never saved has no working hours to invoice."""
        from timesheet_service.services.invoice_service import InvoiceService

        mock_db, collections = _mock_db()
        collections["invoice_settings"].find_one.return_value = _settings_doc()
        collections["users"].find_one.return_value = {"default_template_id": None}
        collections["invoice_templates"].find = MagicMock(return_value=_cursor([_template_doc()]))
        collections["timesheets"].find_one.return_value = None

        service = InvoiceService(mock_db)

        with pytest.raises(ValueError, match="No working hours"):
            await service.build_invoice(USER_ID, MONDAY)
