"""JSON representations of registry entities.

Keys are camelCase to match the public API.
"""


def _iso(value):
    return value.isoformat() if value else None


def _decimal(value):
    return str(value) if value is not None else None


def category_to_dict(category) -> dict:
    return {
        "id": category.pk,
        "name": category.name,
        "description": category.description,
        "color": category.color,
    }


def methodology_to_dict(methodology) -> dict:
    return {
        "id": methodology.pk,
        "name": methodology.name,
        "description": methodology.description,
        "category": methodology.category.name,
        "documentUrl": methodology.document_url,
    }


def project_to_dict(project) -> dict:
    return {
        "id": project.pk,
        "projectId": project.project_id,
        "name": project.name,
        "description": project.description,
        "category": project.category,
        "methodology": project.methodology,
        "developer": project.developer,
        "location": project.location,
        "latitude": _decimal(project.latitude),
        "longitude": _decimal(project.longitude),
        "startDate": _iso(project.start_date),
        "endDate": _iso(project.end_date),
        "status": project.status,
        "estimatedReduction": project.estimated_reduction,
        "imageUrl": project.image_url,
        "version": project.version,
        "createdAt": _iso(project.created_at),
        "updatedAt": _iso(project.updated_at),
    }


def stage_to_dict(stage) -> dict:
    return {
        "id": stage.pk,
        "name": stage.name,
        "description": stage.description,
        "order": stage.order,
        "requiredDocuments": list(stage.required_documents or []),
        "icon": stage.icon,
    }


def verification_to_dict(verification) -> dict:
    completed = sorted(stage.pk for stage in verification.completed_stages.all())
    return {
        "id": verification.pk,
        "projectId": verification.project.project_id,
        "currentStage": verification.current_stage_id,
        "status": verification.status,
        "completedStages": completed,
        "verifier": verification.verifier,
        "thirdPartyVerifier": verification.third_party_verifier,
        "contactEmail": verification.contact_email,
        "verificationStandard": verification.verification_standard,
        "notes": verification.notes,
        "verificationReport": verification.verification_report,
        "submittedDate": _iso(verification.submitted_date),
        "estimatedCompletionDate": _iso(verification.estimated_completion_date),
        "completedDate": _iso(verification.completed_date),
        "version": verification.version,
    }


def document_to_dict(document) -> dict:
    return {
        "id": document.pk,
        "verificationId": document.verification_id,
        "stageId": document.stage_id,
        "documentType": document.document_type,
        "documentName": document.document_name,
        "documentUrl": document.document_url,
        "uploadedBy": document.uploaded_by.username if document.uploaded_by else None,
        "uploadedAt": _iso(document.uploaded_at),
        "status": document.status,
        "notes": document.notes,
        "reviewedAt": _iso(document.reviewed_at),
    }


def comment_to_dict(comment) -> dict:
    return {
        "id": comment.pk,
        "verificationId": comment.verification_id,
        "stageId": comment.stage_id,
        "comment": comment.comment,
        "commentedBy": comment.commented_by.username if comment.commented_by else None,
        "commentedAt": _iso(comment.commented_at),
        "isInternal": comment.is_internal,
    }


def credit_to_dict(credit) -> dict:
    return {
        "id": credit.pk,
        "serialNumber": credit.serial_number,
        "projectId": credit.project.project_id,
        "vintage": credit.vintage,
        "batchNumber": credit.batch_number,
        "quantity": credit.quantity,
        "owner": credit.owner,
        "status": credit.status,
        "issuanceDate": _iso(credit.issuance_date),
        "retirementDate": _iso(credit.retirement_date),
        "retirementPurpose": credit.retirement_purpose,
        "retirementBeneficiary": credit.retirement_beneficiary,
        "transferDate": _iso(credit.transfer_date),
        "transferRecipient": credit.transfer_recipient,
        "transferPurpose": credit.transfer_purpose,
        "parisAgreementEligible": credit.paris_agreement_eligible,
        "hostCountry": credit.host_country,
        "correspondingAdjustmentStatus": credit.corresponding_adjustment_status,
        "correspondingAdjustmentDetails": credit.corresponding_adjustment_details,
        "internationalTransfer": credit.international_transfer,
        "mitigationOutcome": credit.mitigation_outcome,
        "authorizationReference": credit.authorization_reference,
        "authorizationDate": _iso(credit.authorization_date),
        "version": credit.version,
    }


def adjustment_to_dict(adjustment) -> dict:
    return {
        "id": adjustment.pk,
        "creditId": adjustment.credit_id,
        "creditSerialNumber": adjustment.credit_serial_number,
        "hostCountry": adjustment.host_country,
        "recipientCountry": adjustment.recipient_country,
        "adjustmentType": adjustment.adjustment_type,
        "adjustmentQuantity": adjustment.adjustment_quantity,
        "status": adjustment.status,
        "adjustmentDate": _iso(adjustment.adjustment_date),
        "ndcTarget": adjustment.ndc_target,
        "mitigationOutcomeType": adjustment.mitigation_outcome_type,
        "authorizedBy": adjustment.authorized_by,
        "verifiedBy": adjustment.verified_by,
        "authorizationDocument": adjustment.authorization_document,
        "verificationDocument": adjustment.verification_document,
        "notes": adjustment.notes,
        "version": adjustment.version,
        "createdAt": _iso(adjustment.created_at),
    }


def activity_to_dict(entry) -> dict:
    return {
        "id": entry.pk,
        "action": entry.action,
        "description": entry.description,
        "entityType": entry.entity_type,
        "entityId": entry.entity_id,
        "userId": entry.actor_id,
        "actor": entry.actor_display,
        "metadata": entry.metadata,
        "timestamp": _iso(entry.timestamp),
    }


def statistics_to_dict(stats) -> dict:
    return {
        "totalProjects": stats.total_projects,
        "verifiedProjects": stats.verified_projects,
        "pendingVerification": stats.pending_verification,
        "totalCredits": stats.total_credits,
        "lastUpdated": _iso(stats.last_updated),
    }
