"""URL configuration for the carbon registry API."""

from django.urls import path

from . import views

app_name = "carbon_registry"

urlpatterns = [
    # Reference data
    path("api/categories", views.categories_collection, name="categories"),
    path("api/methodologies", views.methodologies_collection, name="methodologies"),

    # Projects
    path("api/projects", views.projects_collection, name="projects"),
    path("api/projects/<str:project_id>", views.project_detail, name="project_detail"),

    # Verification pipeline
    path("api/verification-stages", views.verification_stages, name="verification_stages"),
    path("api/verifications", views.verifications_collection, name="verifications"),
    path("api/verifications/<int:pk>", views.verification_detail, name="verification_detail"),
    path(
        "api/verifications/<int:pk>/complete-stage/<int:stage_id>",
        views.complete_stage,
        name="complete_stage",
    ),
    path("api/verifications/<int:pk>/documents", views.verification_documents, name="verification_documents"),
    path("api/verification-documents/<int:pk>", views.review_document, name="review_document"),
    path("api/verifications/<int:pk>/comments", views.verification_comments, name="verification_comments"),

    # Credits
    path("api/credits", views.credits_collection, name="credits"),
    path("api/credits/<int:pk>/retire", views.retire_credit, name="retire_credit"),
    path("api/credits/<int:pk>/transfer", views.transfer_credit, name="transfer_credit"),
    path("api/credits/<int:pk>/paris-compliance", views.paris_compliance, name="paris_compliance"),
    path("api/credits/<int:pk>/adjustments", views.credit_adjustments, name="credit_adjustments"),
    path("api/credits/<str:serial_number>", views.credit_by_serial, name="credit_by_serial"),

    # Corresponding adjustments
    path("api/adjustments", views.adjustments_collection, name="adjustments"),
    path("api/adjustments/<int:pk>", views.adjustment_detail, name="adjustment_detail"),

    # Activity and statistics
    path("api/activity", views.activity, name="activity"),
    path("api/statistics", views.statistics, name="statistics"),
]
