from diagnostics.types import CandidateElement

selectors = {
    # Navigation menu
    "self_service_menu": 'p:has-text("Self Service")',
    "reports_menu": 'p:has-text("Reports")',
    "employee_menu": 'p:has-text("Employee")',

    # Reports
    "my_job_card_button": 'button:has-text("My Job Card")',
    "monthly_attendance_button": 'button:has-text("Monthly Attendance")',
}

# Elements the navigation snapshot looks for by default
DEFAULT_DEBUG_CANDIDATES = [
    CandidateElement("Self Service", selectors["self_service_menu"]),
    CandidateElement("Reports", selectors["reports_menu"]),
    CandidateElement("My Job Card", selectors["my_job_card_button"]),
    CandidateElement("Monthly Attendance", selectors["monthly_attendance_button"]),
    CandidateElement("Employee Menu", selectors["employee_menu"]),
]
