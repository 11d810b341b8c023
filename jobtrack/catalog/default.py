"""Built-in workflow catalog for residential construction projects."""

from __future__ import annotations

from ..constants import PROSPECT_NON_INSURANCE
from .models import (
    ConditionalRule,
    Phase,
    StepDefinition,
    StepSequence,
    StepTemplate,
    WorkflowCatalog,
    WorkflowTemplates,
    standard_phases,
)

# Projects that never stated the flag are treated as insurance claims.
INSURANCE_ONLY = ConditionalRule(
    attribute="is_insurance_claim", allowed=(True,), when_missing=True
)
NON_INSURANCE_ONLY = ConditionalRule(
    attribute="is_insurance_claim", allowed=(False,), when_missing=True
)


def _project_types(*types: str) -> ConditionalRule:
    return ConditionalRule(attribute="project_type", allowed=types)


WEIGHTED_STEPS = (
    StepDefinition(id="lead_1", display_name="Input Customer Information", weight=2, phase_id=Phase.LEAD),
    StepDefinition(id="prospect_1", display_name="Site Inspection", weight=4, phase_id=Phase.PROSPECT, rule=INSURANCE_ONLY),
    StepDefinition(id="prospect_2", display_name="Write Estimate", weight=3, phase_id=Phase.PROSPECT, rule=INSURANCE_ONLY),
    StepDefinition(id="prospect_non_insurance_1", display_name="Write Estimate", weight=3, phase_id=Phase.PROSPECT, rule=NON_INSURANCE_ONLY),
    StepDefinition(id="prospect_non_insurance_2", display_name="Agreement Signing", weight=4, phase_id=Phase.PROSPECT, rule=NON_INSURANCE_ONLY),
    StepDefinition(id="approved_1", display_name="Administrative Setup", weight=3, phase_id=Phase.APPROVED),
    StepDefinition(id="execution_1", display_name="Installation", weight=10, phase_id=Phase.EXECUTION),
    StepDefinition(id="execution_2", display_name="Quality Check", weight=5, phase_id=Phase.EXECUTION),
    StepDefinition(
        id="supplement_1",
        display_name="Create Supp in Xactimate",
        weight=3,
        phase_id=Phase.SECOND_SUPPLEMENT,
        rule=_project_types("ROOF_REPLACEMENT", "FULL_EXTERIOR"),
    ),
    StepDefinition(
        id="supplement_2",
        display_name="Follow-Up Calls",
        weight=2,
        phase_id=Phase.SECOND_SUPPLEMENT,
        rule=_project_types("ROOF_REPLACEMENT", "FULL_EXTERIOR", "KITCHEN_REMODEL"),
    ),
    StepDefinition(
        id="supplement_3",
        display_name="Review Approved Supp",
        weight=3,
        phase_id=Phase.SECOND_SUPPLEMENT,
        rule=_project_types("FULL_EXTERIOR", "KITCHEN_REMODEL"),
    ),
    StepDefinition(
        id="supplement_4",
        display_name="Customer Update",
        weight=2,
        phase_id=Phase.SECOND_SUPPLEMENT,
        rule=_project_types("FULL_EXTERIOR", "KITCHEN_REMODEL"),
    ),
    StepDefinition(id="completion_1", display_name="Financial Processing", weight=5, phase_id=Phase.COMPLETION),
    StepDefinition(id="completion_2", display_name="Project Closeout", weight=5, phase_id=Phase.COMPLETION),
)


LEAD_STEPS = StepSequence(
    phase_id=Phase.LEAD,
    phase_label=Phase.LEAD.value,
    steps=(
        StepTemplate(
            step_id="lead_1",
            name="Input Customer Information",
            description="Input customer information and verify details",
            default_role="OFFICE",
            sub_tasks=(
                "Make sure the name is spelled correctly",
                "Make sure the email is correct. Send a confirmation email to confirm email.",
            ),
        ),
        StepTemplate(
            step_id="lead_2",
            name="Complete Questions to Ask Checklist",
            description="Complete customer questions checklist and record details",
            default_role="OFFICE",
            sub_tasks=(
                "Input answers from Question Checklist into notes",
                "Record property details",
            ),
        ),
        StepTemplate(
            step_id="lead_3",
            name="Input Lead Property Information",
            description="Gather and input all property information and photos",
            default_role="OFFICE",
            sub_tasks=(
                "Add Home View photos - Maps",
                "Add Street View photos - Google Maps",
                "Add elevation screenshot - PPRBD",
                "Add property age - County Assessor Website",
                "Evaluate ladder requirements - By looking at the room",
            ),
        ),
        StepTemplate(
            step_id="lead_4",
            name="Assign A Project Manager",
            description="Select and assign project manager using workflow",
            default_role="OFFICE",
            sub_tasks=(
                "Use workflow from Lead Assigning Flowchart",
                "Select and brief the Project Manager",
            ),
        ),
        StepTemplate(
            step_id="lead_5",
            name="Schedule Initial Inspection",
            description="Coordinate and schedule initial inspection",
            default_role="OFFICE",
            sub_tasks=(
                "Call Customer and coordinate with PM schedule",
                "Create Calendar Appointment in AL",
            ),
        ),
    ),
)

PROSPECT_INSURANCE_STEPS = StepSequence(
    phase_id=Phase.PROSPECT,
    phase_label=Phase.PROSPECT.value,
    steps=(
        StepTemplate(
            step_id="prospect_1",
            name="Site Inspection",
            description="Conduct comprehensive site inspection",
            default_role="PROJECT_MANAGER",
            sub_tasks=(
                "Take site photos",
                "Complete inspection form",
                "Document material colors",
                "Capture Hover photos",
                "Present upgrade options",
            ),
        ),
        StepTemplate(
            step_id="prospect_2",
            name="Write Estimate",
            description="Prepare detailed project estimate",
            default_role="PROJECT_MANAGER",
            estimated_duration=2,
            sub_tasks=(
                "Fill out Estimate Form",
                "Write initial estimate - AccuLynx",
                "Write Customer Pay Estimates",
                "Send for Approval",
            ),
        ),
        StepTemplate(
            step_id="prospect_3",
            name="Insurance Process",
            description="Process insurance estimates and supplements",
            default_role="ADMINISTRATION",
            estimated_duration=2,
            sub_tasks=(
                "Compare field vs insurance estimates",
                "Identify supplemental items",
                "Draft estimate in Xactimate",
            ),
        ),
        StepTemplate(
            step_id="prospect_4",
            name="Agreement Preparation",
            description="Prepare customer agreement and estimates",
            default_role="ADMINISTRATION",
            sub_tasks=(
                "Trade cost analysis",
                "Prepare Estimate Forms",
                "Match AL estimates",
                "Calculate customer pay items",
                "Send shingle/class4 email - PDF",
            ),
        ),
        StepTemplate(
            step_id="prospect_5",
            name="Agreement Signing",
            description="Process agreement signing and deposits",
            default_role="ADMINISTRATION",
            sub_tasks=(
                "Review and send signature request",
                "Record in QuickBooks",
                "Process deposit",
                "Collect signed disclaimers",
            ),
        ),
    ),
)

PROSPECT_NON_INSURANCE_STEPS = StepSequence(
    phase_id=Phase.PROSPECT,
    phase_label=PROSPECT_NON_INSURANCE,
    steps=(
        StepTemplate(
            step_id="prospect_non_insurance_1",
            name="Write Estimate",
            description="Write estimate for non-insurance projects",
            default_role="PROJECT_MANAGER",
            estimated_duration=2,
            sub_tasks=(
                "Fill out Estimate Forms",
                "Write initial estimate in AL and send customer for approval",
                "Follow up with customer for approval",
                "Let Office know the agreement is ready to sign",
            ),
        ),
        StepTemplate(
            step_id="prospect_non_insurance_2",
            name="Agreement Signing",
            description="Process agreement signing for non-insurance projects",
            default_role="ADMINISTRATION",
            sub_tasks=(
                "Review agreement with customer and send a signature request",
                "Record in QuickBooks",
                "Process deposit",
                "Send and collect signatures for any applicable disclaimers",
            ),
        ),
    ),
)

APPROVED_STEPS = StepSequence(
    phase_id=Phase.APPROVED,
    phase_label=Phase.APPROVED.value,
    steps=(
        StepTemplate(
            step_id="approved_1",
            name="Administrative Setup",
            description="Setup administrative requirements for project",
            default_role="ADMINISTRATION",
            sub_tasks=(
                "Confirm shingle choice",
                "Order materials",
                "Create labor orders",
                "Send labor order to roofing crew",
            ),
        ),
        StepTemplate(
            step_id="approved_2",
            name="Pre-Job Actions",
            description="Complete pre-job requirements",
            default_role="OFFICE",
            sub_tasks=("Pull permits",),
        ),
        StepTemplate(
            step_id="approved_3",
            name="Prepare for Production",
            description="Final production preparation and coordination",
            default_role="ADMINISTRATION",
            estimated_duration=2,
            sub_tasks=(
                "All pictures in Job (Gutter, Ventilation, Elevation)",
                "Verify Labor Order in Scheduler - Correct Dates",
                "Verify Labor Order in Scheduler - Correct crew",
                "Send install schedule email to customer",
                "Verify Material Orders - Confirmations from supplier",
                "Verify Material Orders - Call if no confirmation",
                "Provide special crew instructions",
                "Subcontractor Work - Work order in scheduler",
                "Subcontractor Work - Schedule subcontractor",
                "Subcontractor Work - Communicate with customer",
            ),
        ),
    ),
)

EXECUTION_STEPS = StepSequence(
    phase_id=Phase.EXECUTION,
    phase_label=Phase.EXECUTION.value,
    steps=(
        StepTemplate(
            step_id="execution_1",
            name="Installation",
            description="Field installation and documentation",
            default_role="FIELD_DIRECTOR",
            estimated_duration=5,
            sub_tasks=(
                "Document work start",
                "Capture progress photos",
                "Daily Job Progress Note - Work started/finished",
                "Daily Job Progress Note - Days and people needed",
                "Daily Job Progress Note - Format: 2 Guys for 4 hours",
                "Upload Pictures",
            ),
        ),
        StepTemplate(
            step_id="execution_2",
            name="Quality Check",
            description="Quality inspection and documentation",
            default_role="ROOF_SUPERVISOR",
            sub_tasks=(
                "Completion photos - Roof Supervisor",
                "Complete inspection - Roof Supervisor",
                "Upload Roof Packet",
                "Verify Packet is complete - Admin",
            ),
        ),
        StepTemplate(
            step_id="execution_3",
            name="Multiple Trades",
            description="Coordinate multiple trade work",
            default_role="ADMINISTRATION",
            sub_tasks=(
                "Confirm start date",
                "Confirm material/labor for all trades",
            ),
        ),
        StepTemplate(
            step_id="execution_4",
            name="Subcontractor Work",
            description="Manage subcontractor coordination",
            default_role="ADMINISTRATION",
            sub_tasks=(
                "Confirm dates",
                "Communicate with customer",
            ),
        ),
        StepTemplate(
            step_id="execution_5",
            name="Update Customer",
            description="Customer completion notification and payment",
            default_role="ADMINISTRATION",
            sub_tasks=(
                "Notify of completion",
                "Share photos",
                "Send 2nd half payment link",
            ),
        ),
    ),
)

SECOND_SUPPLEMENT_STEPS = StepSequence(
    phase_id=Phase.SECOND_SUPPLEMENT,
    phase_label=Phase.SECOND_SUPPLEMENT.value,
    steps=(
        StepTemplate(
            step_id="supplement_1",
            name="Create Supp in Xactimate",
            description="Create supplement in Xactimate system",
            default_role="ADMINISTRATION",
            estimated_duration=2,
            sub_tasks=(
                "Check Roof Packet & Checklist",
                "Label photos",
                "Add to Xactimate",
                "Submit to insurance",
            ),
        ),
        StepTemplate(
            step_id="supplement_2",
            name="Follow-Up Calls",
            description="Insurance follow-up calls",
            default_role="ADMINISTRATION",
            estimated_duration=7,
            sub_tasks=("Call 2x/week until updated estimate",),
        ),
        StepTemplate(
            step_id="supplement_3",
            name="Review Approved Supp",
            description="Review and process approved supplement",
            default_role="ADMINISTRATION",
            sub_tasks=(
                "Update trade cost",
                "Prepare counter-supp or email",
                "Add to AL Estimate",
            ),
        ),
        StepTemplate(
            step_id="supplement_4",
            name="Customer Update",
            description="Update customer on supplement status",
            default_role="ADMINISTRATION",
            sub_tasks=(
                "Share 2 items minimum",
                "Let them know next steps",
            ),
        ),
    ),
)

COMPLETION_STEPS = StepSequence(
    phase_id=Phase.COMPLETION,
    phase_label=Phase.COMPLETION.value,
    steps=(
        StepTemplate(
            step_id="completion_1",
            name="Financial Processing",
            description="Process final financial items",
            default_role="ADMINISTRATION",
            estimated_duration=2,
            sub_tasks=(
                "Verify worksheet",
                "Final invoice & payment link",
                "AR follow-up calls",
            ),
        ),
        StepTemplate(
            step_id="completion_2",
            name="Project Closeout",
            description="Final project closeout and documentation",
            default_role="ADMINISTRATION",
            sub_tasks=(
                "Final project documentation",
                "Warranty information",
                "Customer satisfaction survey",
            ),
        ),
    ),
)

DEFAULT_TEMPLATES = WorkflowTemplates(
    lead=LEAD_STEPS,
    prospect_insurance=PROSPECT_INSURANCE_STEPS,
    prospect_non_insurance=PROSPECT_NON_INSURANCE_STEPS,
    approved=APPROVED_STEPS,
    execution=EXECUTION_STEPS,
    second_supplement=SECOND_SUPPLEMENT_STEPS,
    completion=COMPLETION_STEPS,
)

DEFAULT_CATALOG = WorkflowCatalog(
    phases=standard_phases(),
    steps=WEIGHTED_STEPS,
    templates=DEFAULT_TEMPLATES,
)


def default_catalog() -> WorkflowCatalog:
    """Return the built-in catalog. The instance is frozen and shared."""
    return DEFAULT_CATALOG
