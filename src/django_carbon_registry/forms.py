"""Request body validation for the registry API.

API bodies use camelCase keys; forms use the model field names. A form
built with ``partial=True`` only validates the keys present in the body,
which is how PUT and PATCH requests are handled.
"""

import re

from django import forms
from django.core.validators import RegexValidator

from .exceptions import ValidationError
from .models import (
    CarbonCredit,
    CorrespondingAdjustment,
    ProjectVerification,
    VerificationDocument,
    VerificationStage,
)

_CAMEL_RE = re.compile(r"(?<!^)(?=[A-Z])")

country_code_validator = RegexValidator(
    r"^[A-Za-z]{2,3}$", "Enter a 2-3 letter country code."
)


def to_snake(key: str) -> str:
    """projectId -> project_id"""
    return _CAMEL_RE.sub("_", key).lower()


def to_camel(name: str) -> str:
    """project_id -> projectId"""
    head, *rest = name.split("_")
    return head + "".join(part.title() for part in rest)


class ApiForm(forms.Form):
    """
    Base form for JSON request bodies.

    Usage:
        form = CreditIssueForm.from_json(body)
        data = form.validated()  # raises ValidationError with camelCase fields
    """

    def __init__(self, data, partial: bool = False, **kwargs):
        super().__init__(data, **kwargs)
        self.partial = partial
        if partial:
            for name in list(self.fields):
                if name not in data:
                    del self.fields[name]

    @classmethod
    def from_json(cls, body: dict, partial: bool = False):
        return cls({to_snake(key): value for key, value in body.items()}, partial=partial)

    def field_errors(self) -> dict:
        errors = {}
        for name, messages in self.errors.get_json_data().items():
            key = "nonFieldErrors" if name == "__all__" else to_camel(name)
            errors[key] = [message["message"] for message in messages]
        return errors

    def unknown_field_errors(self) -> dict:
        return {
            to_camel(name): ["This field cannot be set."]
            for name in self.data
            if name not in self.fields
        }

    def validated(self) -> dict:
        """
        Return cleaned values for the keys present in the body.

        Keys the form does not declare are rejected, not ignored.
        """
        unknown = self.unknown_field_errors()
        if not self.is_valid() or unknown:
            raise ValidationError({**self.field_errors(), **unknown})
        return {
            name: value
            for name, value in self.cleaned_data.items()
            if name in self.data
        }


class VersionedForm(ApiForm):
    """Form carrying an optional ``version`` for optimistic concurrency."""

    version = forms.IntegerField(required=False, min_value=1)

    def validated(self) -> dict:
        data = super().validated()
        data["expected_version"] = data.pop("version", None)
        return data


class CategoryForm(ApiForm):
    name = forms.CharField(max_length=100)
    description = forms.CharField(required=False)
    color = forms.CharField(max_length=20, required=False)


class MethodologyForm(ApiForm):
    name = forms.CharField(max_length=100)
    category = forms.CharField(max_length=100)
    description = forms.CharField(required=False)
    document_url = forms.URLField(required=False)


class ProjectForm(ApiForm):
    project_id = forms.CharField(max_length=32, required=False)
    country_code = forms.CharField(required=False, validators=[country_code_validator])
    name = forms.CharField(max_length=255)
    description = forms.CharField(required=False)
    category = forms.CharField(max_length=100)
    methodology = forms.CharField(max_length=100)
    developer = forms.CharField(max_length=150, required=False)
    location = forms.CharField(max_length=255)
    latitude = forms.DecimalField(max_digits=9, decimal_places=6, required=False, min_value=-90, max_value=90)
    longitude = forms.DecimalField(max_digits=9, decimal_places=6, required=False, min_value=-180, max_value=180)
    start_date = forms.DateField()
    end_date = forms.DateField()
    status = forms.CharField(max_length=20, required=False)
    estimated_reduction = forms.IntegerField(min_value=1)
    image_url = forms.URLField(required=False)

    def clean(self):
        cleaned = super().clean()
        start, end = cleaned.get("start_date"), cleaned.get("end_date")
        if start and end and end < start:
            self.add_error("end_date", "End date must not be before the start date.")
        if not self.partial and not (cleaned.get("project_id") or cleaned.get("country_code")):
            self.add_error("country_code", "Required when no projectId is given.")
        return cleaned


class ProjectUpdateForm(ProjectForm, VersionedForm):
    """Partial project update. Identity fields cannot change."""

    project_id = None
    country_code = None
    developer = None


class VerificationForm(ApiForm):
    verifier = forms.CharField(max_length=150, required=False)
    third_party_verifier = forms.CharField(max_length=255, required=False)
    contact_email = forms.EmailField(required=False)
    verification_standard = forms.CharField(max_length=100, required=False)
    notes = forms.CharField(required=False)
    verification_report = forms.URLField(required=False)
    estimated_completion_date = forms.DateTimeField(required=False)


class VerificationRequestForm(VerificationForm):
    project_id = forms.CharField(max_length=32)


class VerificationUpdateForm(VerificationForm, VersionedForm):
    current_stage = forms.ModelChoiceField(queryset=VerificationStage.objects.all(), required=False)
    status = forms.ChoiceField(choices=ProjectVerification.Status.choices, required=False)


class DocumentForm(ApiForm):
    stage_id = forms.ModelChoiceField(queryset=VerificationStage.objects.all())
    document_type = forms.CharField(max_length=100)
    document_name = forms.CharField(max_length=255)
    document_url = forms.URLField()


class DocumentReviewForm(ApiForm):
    status = forms.ChoiceField(choices=VerificationDocument.Status.choices)
    notes = forms.CharField(required=False)


class CommentForm(ApiForm):
    stage_id = forms.ModelChoiceField(queryset=VerificationStage.objects.all())
    comment = forms.CharField()
    is_internal = forms.BooleanField(required=False)


class ParisFieldsForm(ApiForm):
    paris_agreement_eligible = forms.BooleanField(required=False)
    host_country = forms.CharField(required=False, validators=[country_code_validator])
    corresponding_adjustment_status = forms.ChoiceField(
        choices=[("", "---")] + list(CarbonCredit.AdjustmentStatus.choices),
        required=False,
    )
    corresponding_adjustment_details = forms.CharField(required=False)
    international_transfer = forms.BooleanField(required=False)
    mitigation_outcome = forms.CharField(max_length=100, required=False)
    authorization_reference = forms.CharField(max_length=255, required=False)
    authorization_date = forms.DateField(required=False)


class ParisComplianceForm(ParisFieldsForm, VersionedForm):
    pass


class CreditIssueForm(ParisFieldsForm):
    project_id = forms.CharField(max_length=32)
    quantity = forms.IntegerField(min_value=1)
    vintage = forms.IntegerField(min_value=1000, max_value=9999)


class RetireForm(VersionedForm):
    purpose = forms.CharField(required=False)
    beneficiary = forms.CharField(max_length=255, required=False)


class TransferForm(VersionedForm):
    recipient = forms.CharField(max_length=150)
    purpose = forms.CharField(required=False)


class AdjustmentFieldsForm(ApiForm):
    host_country = forms.CharField(validators=[country_code_validator])
    recipient_country = forms.CharField(required=False, validators=[country_code_validator])
    adjustment_type = forms.ChoiceField(choices=CorrespondingAdjustment.AdjustmentType.choices)
    adjustment_quantity = forms.IntegerField(min_value=1)
    adjustment_date = forms.DateField(required=False)
    ndc_target = forms.CharField(max_length=255, required=False)
    mitigation_outcome_type = forms.CharField(max_length=100, required=False)
    authorized_by = forms.CharField(max_length=255, required=False)
    verified_by = forms.CharField(max_length=255, required=False)
    authorization_document = forms.URLField(required=False)
    verification_document = forms.URLField(required=False)
    notes = forms.CharField(required=False)


class AdjustmentCreateForm(AdjustmentFieldsForm):
    credit_id = forms.IntegerField(min_value=1)


class AdjustmentUpdateForm(AdjustmentFieldsForm, VersionedForm):
    status = forms.ChoiceField(choices=CorrespondingAdjustment.Status.choices)


class ActivityQueryForm(ApiForm):
    limit = forms.IntegerField(required=False, min_value=1)
    entity_type = forms.CharField(required=False)
    entity_id = forms.CharField(required=False)

    def unknown_field_errors(self) -> dict:
        # query strings may carry unrelated parameters
        return {}
