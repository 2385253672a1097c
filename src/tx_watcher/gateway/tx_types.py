"""Mapping from UI transaction names to gateway ``tx_type`` tags.

Several UI transactions share one gateway tag (e.g. assignment commit and
update are both ``assignment_submit``).
"""

from __future__ import annotations

import logging

logger = logging.getLogger(__name__)

TX_TYPE_MAP: dict[str, str] = {
    # Global
    "GLOBAL_GENERAL_ACCESS_TOKEN_MINT": "access_token_mint",
    "GLOBAL_USER_ACCESS_TOKEN_CLAIM": "access_token_mint",
    # Course - instance / owner
    "INSTANCE_COURSE_CREATE": "course_create",
    "COURSE_OWNER_TEACHERS_MANAGE": "teachers_update",
    # Course - teacher
    "COURSE_TEACHER_MODULES_MANAGE": "modules_manage",
    "COURSE_TEACHER_ASSIGNMENTS_ASSESS": "assessment_assess",
    # Course - student
    "COURSE_STUDENT_ASSIGNMENT_COMMIT": "assignment_submit",
    "COURSE_STUDENT_ASSIGNMENT_UPDATE": "assignment_submit",
    "COURSE_STUDENT_CREDENTIAL_CLAIM": "credential_claim",
    # Project - instance / owner
    "INSTANCE_PROJECT_CREATE": "project_create",
    "PROJECT_OWNER_MANAGERS_MANAGE": "managers_manage",
    "PROJECT_OWNER_BLACKLIST_MANAGE": "blacklist_update",
    # Project - manager
    "PROJECT_MANAGER_TASKS_MANAGE": "tasks_manage",
    "PROJECT_MANAGER_TASKS_ASSESS": "task_assess",
    # Project - contributor
    "PROJECT_CONTRIBUTOR_TASK_COMMIT": "project_join",
    "PROJECT_CONTRIBUTOR_TASK_ACTION": "task_submit",
    "PROJECT_CONTRIBUTOR_CREDENTIAL_CLAIM": "project_credential_claim",
    # Project - user
    "PROJECT_USER_TREASURY_ADD_FUNDS": "treasury_fund",
}


def get_gateway_tx_type(transaction_type: str) -> str:
    """Return the gateway tag for *transaction_type*.

    Unknown names are passed through lower-cased.
    """
    mapped = TX_TYPE_MAP.get(transaction_type)
    if mapped is None:
        logger.warning("Unknown transaction type %s, using as-is", transaction_type)
        return transaction_type.lower()
    return mapped
