"""Invoice service - contractor settings, templates and invoices."""
import logging
from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from bson import Decimal128, ObjectId

from timesheet_service.errors import MissingSettingsError
from timesheet_service.models.invoice import (
    ContractorSettings,
    ContractorSettingsUpdate,
    InvoiceTemplate,
    InvoiceTemplateCreate,
    InvoiceTemplateUpdate,
    InvoiceView,
)
from timesheet_service.services.timesheet_service import TimesheetService
from timesheet_service.utils.invoice import compute_invoice, order_templates, select_template
from timesheet_service.utils.invoice_number import generate_invoice_number
from timesheet_service.utils.week import blank_week, has_working_hours

logger = logging.getLogger(__name__)

MONEY_FIELDS = ("day_rate", "gst_percentage")
NON_NULL_FIELDS = ("template_name", "client_name", "is_active") + MONEY_FIELDS


def _to_decimal(value) -> Decimal:
    if isinstance(value, Decimal128):
        return value.to_decimal()
    return Decimal(str(value))


class InvoiceService:
    """Service for invoice settings, templates and invoice generation."""

    def __init__(self, db):
        """Initialize service with database connection."""
        self.db = db
        self.settings = db["invoice_settings"]
        self.templates = db["invoice_templates"]
        self.users = db["users"]

    def _doc_to_settings(self, doc: dict) -> ContractorSettings:
        """Convert database document to ContractorSettings model."""
        return ContractorSettings(
            _id=str(doc["_id"]),
            user_id=doc["user_id"],
            contractor_name=doc["contractor_name"],
            abn=doc["abn"],
            bank_bsb=doc["bank_bsb"],
            bank_account=doc["bank_account"],
            address_line1=doc["address_line1"],
            address_line2=doc.get("address_line2"),
            city=doc["city"],
            state=doc["state"],
            postcode=doc["postcode"],
            created_at=doc["created_at"],
            updated_at=doc["updated_at"],
        )

    def _doc_to_template(self, doc: dict, default_id: Optional[str]) -> InvoiceTemplate:
        """
        Convert database document to InvoiceTemplate model.

        ``is_default`` is not stored on templates; it is derived from the
        owning user's ``default_template_id``.
        """
        template_id = str(doc["_id"])
        return InvoiceTemplate(
            _id=template_id,
            user_id=doc["user_id"],
            template_name=doc["template_name"],
            client_name=doc["client_name"],
            day_rate=_to_decimal(doc["day_rate"]),
            gst_percentage=_to_decimal(doc["gst_percentage"]),
            custom_contractor_name=doc.get("custom_contractor_name"),
            custom_abn=doc.get("custom_abn"),
            custom_bank_bsb=doc.get("custom_bank_bsb"),
            custom_bank_account=doc.get("custom_bank_account"),
            custom_address=doc.get("custom_address"),
            is_default=template_id == default_id,
            is_active=doc.get("is_active", True),
            created_at=doc["created_at"],
            updated_at=doc["updated_at"],
        )

    # --- Contractor settings ---

    async def get_settings(self, user_id: str) -> Optional[ContractorSettings]:
        """Get the user's contractor settings, or None if not set up yet."""
        doc = await self.settings.find_one({"user_id": user_id})
        if not doc:
            return None
        return self._doc_to_settings(doc)

    async def upsert_settings(
        self,
        user_id: str,
        settings_update: ContractorSettingsUpdate,
    ) -> ContractorSettings:
        """
        Create or replace the user's contractor settings.

        Args:
            user_id: User ID
            settings_update: Full set of contractor fields

        Returns:
            Saved settings
        """
        now = datetime.utcnow()
        update_doc = settings_update.model_dump()
        update_doc["updated_at"] = now

        doc = await self.settings.find_one_and_update(
            {"user_id": user_id},
            {"$set": update_doc, "$setOnInsert": {"created_at": now}},
            upsert=True,
            return_document=True,
        )

        logger.info("Saved invoice settings for user %s", user_id)
        return self._doc_to_settings(doc)

    # --- Templates ---

    async def _get_default_template_id(self, user_id: str) -> Optional[str]:
        if not ObjectId.is_valid(user_id):
            return None
        user_doc = await self.users.find_one(
            {"_id": ObjectId(user_id)},
            {"default_template_id": 1},
        )
        if not user_doc:
            return None
        return user_doc.get("default_template_id")

    async def _set_default(self, user_id: str, template_id: str) -> None:
        await self.users.update_one(
            {"_id": ObjectId(user_id)},
            {"$set": {"default_template_id": template_id, "updated_at": datetime.utcnow()}},
        )

    async def _clear_default(self, user_id: str, template_id: str) -> None:
        # Only clears when this template is still the default
        await self.users.update_one(
            {"_id": ObjectId(user_id), "default_template_id": template_id},
            {"$set": {"default_template_id": None, "updated_at": datetime.utcnow()}},
        )

    async def _find_template_doc(self, user_id: str, template_id: str) -> dict:
        if not ObjectId.is_valid(template_id):
            raise ValueError("Template not found")

        doc = await self.templates.find_one({
            "_id": ObjectId(template_id),
            "user_id": user_id,
        })
        if not doc:
            raise ValueError("Template not found")
        return doc

    async def list_templates(self, user_id: str) -> list[InvoiceTemplate]:
        """
        List the user's active templates.

        Returns:
            Templates ordered default-first, then by template name
        """
        default_id = await self._get_default_template_id(user_id)

        cursor = self.templates.find({"user_id": user_id, "is_active": True})
        docs = await cursor.to_list(length=None)

        return order_templates([self._doc_to_template(doc, default_id) for doc in docs])

    async def get_template(self, user_id: str, template_id: str) -> InvoiceTemplate:
        """
        Get a template by ID.

        Raises:
            ValueError: If template not found
        """
        doc = await self._find_template_doc(user_id, template_id)
        default_id = await self._get_default_template_id(user_id)
        return self._doc_to_template(doc, default_id)

    async def create_template(
        self,
        user_id: str,
        template_create: InvoiceTemplateCreate,
    ) -> InvoiceTemplate:
        """
        Create a new template.

        Creating a template with ``is_default`` makes it the user's only
        default template.
        """
        now = datetime.utcnow()

        template_doc = template_create.model_dump(exclude={"is_default"})
        for field in MONEY_FIELDS:
            template_doc[field] = Decimal128(template_doc[field])
        template_doc.update({
            "user_id": user_id,
            "created_at": now,
            "updated_at": now,
        })

        result = await self.templates.insert_one(template_doc)
        template_doc["_id"] = result.inserted_id
        template_id = str(result.inserted_id)

        if template_create.is_default and template_create.is_active:
            await self._set_default(user_id, template_id)
            default_id = template_id
        else:
            default_id = await self._get_default_template_id(user_id)

        logger.info("Created invoice template %s for user %s", template_id, user_id)
        return self._doc_to_template(template_doc, default_id)

    async def update_template(
        self,
        user_id: str,
        template_id: str,
        template_update: InvoiceTemplateUpdate,
    ) -> InvoiceTemplate:
        """
        Update a template.

        Raises:
            ValueError: If template not found
        """
        existing = await self._find_template_doc(user_id, template_id)

        update_doc = template_update.model_dump(exclude_unset=True, exclude={"is_default"})
        for field in NON_NULL_FIELDS:
            if field in update_doc and update_doc[field] is None:
                del update_doc[field]
        for field in MONEY_FIELDS:
            if field in update_doc:
                update_doc[field] = Decimal128(update_doc[field])
        update_doc["updated_at"] = datetime.utcnow()

        updated_doc = await self.templates.find_one_and_update(
            {"_id": existing["_id"], "user_id": user_id},
            {"$set": update_doc},
            return_document=True,
        )

        if not updated_doc:
            raise ValueError("Template not found")

        is_active = updated_doc.get("is_active", True)
        if template_update.is_default and is_active:
            await self._set_default(user_id, template_id)
        elif template_update.is_default is False or not is_active:
            await self._clear_default(user_id, template_id)

        default_id = await self._get_default_template_id(user_id)
        return self._doc_to_template(updated_doc, default_id)

    async def delete_template(self, user_id: str, template_id: str) -> dict:
        """
        Permanently delete a template.

        Returns:
            Dictionary with deleted_count

        Raises:
            ValueError: If template not found
        """
        existing = await self._find_template_doc(user_id, template_id)

        result = await self.templates.delete_one({"_id": existing["_id"], "user_id": user_id})
        await self._clear_default(user_id, template_id)

        logger.info("Deleted invoice template %s for user %s", template_id, user_id)
        return {"deleted_count": result.deleted_count}

    # --- Invoices ---

    async def build_invoice(
        self,
        user_id: str,
        week_start: date,
        template_id: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> InvoiceView:
        """
        Build the invoice for a week.

        Args:
            user_id: User ID
            week_start: Monday of the invoiced week
            template_id: Optional template to use instead of the default
            now: Optional timestamp for the invoice number

        Returns:
            Computed invoice

        Raises:
            MissingSettingsError: If contractor settings are not set up
            MissingTemplateError: If there is no active template
            ValueError: If the week has no recorded working hours
        """
        settings = await self.get_settings(user_id)
        if settings is None:
            raise MissingSettingsError("Invoice settings not configured")

        templates = await self.list_templates(user_id)
        template = select_template(templates, template_id)

        week = await TimesheetService(self.db).get_week(user_id=user_id, week_start=week_start)
        if week is None:
            week = blank_week(week_start)

        if not has_working_hours(week):
            raise ValueError("No working hours recorded for this week")

        return compute_invoice(week, template, settings, generate_invoice_number(now))
