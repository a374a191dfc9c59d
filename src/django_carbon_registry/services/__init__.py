"""Service functions for the carbon registry.

Provides:
- projects: create_project, update_project
- reference: check_classification, create_category, create_methodology
- verification: request_verification, advance_stage, complete_stage,
  approve_verification, reject_verification, assign_verifier,
  update_verification, add_document, review_document, add_comment
- credits: issue_credits, retire_credit, transfer_credit, update_paris_compliance
- adjustments: create_adjustment, update_adjustment

Every service runs in one transaction, locks the entity it changes and
writes exactly one activity entry when it succeeds.
"""
