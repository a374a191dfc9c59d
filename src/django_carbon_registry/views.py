"""JSON API views for the carbon registry.

Views parse and validate the request, call one service or selector and
serialize the result. Errors raised by services are mapped to HTTP
responses by ``api_endpoint``.
"""

import json
import logging
from functools import wraps

from django.http import JsonResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_GET, require_http_methods, require_POST

from . import selectors
from .activity import list_activity
from .exceptions import RegistryError, ValidationError
from .forms import (
    ActivityQueryForm,
    AdjustmentCreateForm,
    AdjustmentUpdateForm,
    CategoryForm,
    CommentForm,
    CreditIssueForm,
    DocumentForm,
    DocumentReviewForm,
    MethodologyForm,
    ParisComplianceForm,
    ProjectForm,
    ProjectUpdateForm,
    RetireForm,
    TransferForm,
    VerificationRequestForm,
    VerificationUpdateForm,
)
from .serializers import (
    activity_to_dict,
    adjustment_to_dict,
    category_to_dict,
    comment_to_dict,
    credit_to_dict,
    document_to_dict,
    methodology_to_dict,
    project_to_dict,
    stage_to_dict,
    statistics_to_dict,
    verification_to_dict,
)
from .services import adjustments, credits, projects, reference, verification
from .statistics import get_statistics

logger = logging.getLogger(__name__)

SAFE_METHODS = ("GET", "HEAD", "OPTIONS")


def api_endpoint(view):
    """
    Wrap a view with authentication and error mapping.

    Writes require an authenticated user. RegistryError subclasses become
    JSON errors with their ``status_code``; anything else is logged and
    returned as a 500.
    """

    @wraps(view)
    def wrapper(request, *args, **kwargs):
        if request.method not in SAFE_METHODS and not request.user.is_authenticated:
            return JsonResponse({"error": "Authentication required"}, status=401)
        try:
            return view(request, *args, **kwargs)
        except ValidationError as e:
            return JsonResponse({"error": e.message, "fields": e.fields}, status=e.status_code)
        except RegistryError as e:
            return JsonResponse({"error": str(e)}, status=e.status_code)
        except Exception:
            logger.exception("Unhandled error in %s %s", request.method, request.path)
            return JsonResponse({"error": "Internal server error"}, status=500)

    return csrf_exempt(wrapper)


def parse_body(request) -> dict:
    """Decode a JSON object body."""
    if not request.body:
        return {}
    try:
        body = json.loads(request.body)
    except (json.JSONDecodeError, UnicodeDecodeError):
        raise ValidationError({"body": ["Request body is not valid JSON."]}, "Invalid JSON body")
    if not isinstance(body, dict):
        raise ValidationError({"body": ["Expected a JSON object."]}, "Invalid JSON body")
    return body


def json_list(items, serializer):
    return JsonResponse([serializer(item) for item in items], safe=False)


# =============================================================================
# Reference data
# =============================================================================


@api_endpoint
@require_http_methods(["GET", "POST"])
def categories_collection(request):
    if request.method == "GET":
        return json_list(selectors.list_categories(), category_to_dict)

    data = CategoryForm.from_json(parse_body(request)).validated()
    category = reference.create_category(request.user, **data)
    return JsonResponse(category_to_dict(category), status=201)


@api_endpoint
@require_http_methods(["GET", "POST"])
def methodologies_collection(request):
    """GET: list methodologies (?category=). POST: add a methodology."""
    if request.method == "GET":
        return json_list(
            selectors.list_methodologies(category=request.GET.get("category")),
            methodology_to_dict,
        )

    data = MethodologyForm.from_json(parse_body(request)).validated()
    methodology = reference.create_methodology(request.user, **data)
    return JsonResponse(methodology_to_dict(methodology), status=201)


# =============================================================================
# Projects
# =============================================================================


@api_endpoint
@require_http_methods(["GET", "POST"])
def projects_collection(request):
    """GET: list projects (?status=&developer=&category=). POST: register a project."""
    if request.method == "GET":
        return json_list(
            selectors.list_projects(
                status=request.GET.get("status"),
                developer=request.GET.get("developer"),
                category=request.GET.get("category"),
            ),
            project_to_dict,
        )

    data = ProjectForm.from_json(parse_body(request)).validated()
    project = projects.create_project(request.user, **data)
    return JsonResponse(project_to_dict(project), status=201)


@api_endpoint
@require_http_methods(["GET", "PUT"])
def project_detail(request, project_id):
    project = projects.get_project(project_id)
    if request.method == "GET":
        return JsonResponse(project_to_dict(project))

    data = ProjectUpdateForm.from_json(parse_body(request), partial=True).validated()
    project = projects.update_project(project, request.user, **data)
    return JsonResponse(project_to_dict(project))


# =============================================================================
# Verification pipeline
# =============================================================================


@api_endpoint
@require_GET
def verification_stages(request):
    return json_list(selectors.list_stages(), stage_to_dict)


@api_endpoint
@require_http_methods(["GET", "POST"])
def verifications_collection(request):
    """GET: list verifications (?status=&projectId=). POST: request verification."""
    if request.method == "GET":
        return json_list(
            selectors.list_verifications(
                status=request.GET.get("status"),
                project_id=request.GET.get("projectId"),
            ),
            verification_to_dict,
        )

    data = VerificationRequestForm.from_json(parse_body(request)).validated()
    project = projects.get_project(data.pop("project_id"))
    result = verification.request_verification(project, request.user, **data)
    return JsonResponse(verification_to_dict(result), status=201)


@api_endpoint
@require_http_methods(["GET", "PUT"])
def verification_detail(request, pk):
    current = verification.get_verification(pk)
    if request.method == "GET":
        return JsonResponse(verification_to_dict(current))

    data = VerificationUpdateForm.from_json(parse_body(request), partial=True).validated()
    if not data.get("status"):
        data.pop("status", None)
    if data.get("current_stage") is None:
        data.pop("current_stage", None)
    result = verification.update_verification(current, request.user, **data)
    return JsonResponse(verification_to_dict(result))


@api_endpoint
@require_POST
def complete_stage(request, pk, stage_id):
    current = verification.get_verification(pk)
    stage = verification.get_stage(stage_id)
    result, warnings = verification.complete_stage(current, stage, request.user)
    payload = verification_to_dict(result)
    payload["warnings"] = warnings
    return JsonResponse(payload)


@api_endpoint
@require_http_methods(["GET", "POST"])
def verification_documents(request, pk):
    current = verification.get_verification(pk)
    if request.method == "GET":
        return json_list(selectors.list_documents(current), document_to_dict)

    data = DocumentForm.from_json(parse_body(request)).validated()
    document = verification.add_document(current, data.pop("stage_id"), request.user, **data)
    return JsonResponse(document_to_dict(document), status=201)


@api_endpoint
@require_http_methods(["PATCH"])
def review_document(request, pk):
    data = DocumentReviewForm.from_json(parse_body(request)).validated()
    document = verification.review_document(pk, request.user, **data)
    return JsonResponse(document_to_dict(document))


@api_endpoint
@require_http_methods(["GET", "POST"])
def verification_comments(request, pk):
    current = verification.get_verification(pk)
    if request.method == "GET":
        include_internal = request.GET.get("includeInternal", "true").lower() != "false"
        return json_list(
            selectors.list_comments(current, include_internal=include_internal),
            comment_to_dict,
        )

    data = CommentForm.from_json(parse_body(request)).validated()
    comment = verification.add_comment(current, data.pop("stage_id"), request.user, **data)
    return JsonResponse(comment_to_dict(comment), status=201)


# =============================================================================
# Credits
# =============================================================================


@api_endpoint
@require_http_methods(["GET", "POST"])
def credits_collection(request):
    """GET: list credits (?projectId=&owner=&status=). POST: issue credits."""
    if request.method == "GET":
        return json_list(
            selectors.list_credits(
                project_id=request.GET.get("projectId"),
                owner=request.GET.get("owner"),
                status=request.GET.get("status"),
            ),
            credit_to_dict,
        )

    data = CreditIssueForm.from_json(parse_body(request)).validated()
    project = projects.get_project(data.pop("project_id"))
    credit = credits.issue_credits(
        project, data.pop("quantity"), data.pop("vintage"), request.user, **data
    )
    return JsonResponse(credit_to_dict(credit), status=201)


@api_endpoint
@require_GET
def credit_by_serial(request, serial_number):
    return JsonResponse(credit_to_dict(credits.get_credit_by_serial(serial_number)))


@api_endpoint
@require_POST
def retire_credit(request, pk):
    credit = credits.get_credit(pk)
    data = RetireForm.from_json(parse_body(request)).validated()
    credit = credits.retire_credit(credit, request.user, **data)
    return JsonResponse(credit_to_dict(credit))


@api_endpoint
@require_POST
def transfer_credit(request, pk):
    credit = credits.get_credit(pk)
    data = TransferForm.from_json(parse_body(request)).validated()
    credit = credits.transfer_credit(credit, data.pop("recipient"), request.user, **data)
    return JsonResponse(credit_to_dict(credit))


@api_endpoint
@require_http_methods(["PATCH"])
def paris_compliance(request, pk):
    credit = credits.get_credit(pk)
    data = ParisComplianceForm.from_json(parse_body(request), partial=True).validated()
    credit = credits.update_paris_compliance(credit, request.user, **data)
    return JsonResponse(credit_to_dict(credit))


@api_endpoint
@require_GET
def credit_adjustments(request, pk):
    credit = credits.get_credit(pk)
    return json_list(selectors.list_adjustments(credit=credit), adjustment_to_dict)


# =============================================================================
# Corresponding adjustments
# =============================================================================


@api_endpoint
@require_http_methods(["GET", "POST"])
def adjustments_collection(request):
    """GET: list adjustments (?status=&hostCountry=). POST: record an adjustment."""
    if request.method == "GET":
        return json_list(
            selectors.list_adjustments(
                status=request.GET.get("status"),
                host_country=request.GET.get("hostCountry"),
            ),
            adjustment_to_dict,
        )

    data = AdjustmentCreateForm.from_json(parse_body(request)).validated()
    credit = credits.get_credit(data.pop("credit_id"))
    adjustment = adjustments.create_adjustment(credit, request.user, **data)
    return JsonResponse(adjustment_to_dict(adjustment), status=201)


@api_endpoint
@require_http_methods(["GET", "PATCH"])
def adjustment_detail(request, pk):
    current = adjustments.get_adjustment(pk)
    if request.method == "GET":
        return JsonResponse(adjustment_to_dict(current))

    data = AdjustmentUpdateForm.from_json(parse_body(request), partial=True).validated()
    result = adjustments.update_adjustment(current, request.user, **data)
    return JsonResponse(adjustment_to_dict(result))


# =============================================================================
# Activity and statistics
# =============================================================================


@api_endpoint
@require_GET
def activity(request):
    """Activity feed, newest first (?limit=&entityType=&entityId=)."""
    query = ActivityQueryForm.from_json(request.GET.dict()).validated()
    entries = list_activity(
        limit=query.get("limit"),
        entity_type=query.get("entity_type") or None,
        entity_id=query.get("entity_id") or None,
    )
    return json_list(entries, activity_to_dict)


@api_endpoint
@require_GET
def statistics(request):
    return JsonResponse(statistics_to_dict(get_statistics()))
