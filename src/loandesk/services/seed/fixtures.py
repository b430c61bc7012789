# This project was developed with assistance from AI tools.
"""
Demo catalog for LoanDesk.

Categories, loan products and the dynamic form fields each category asks
for. Defined as Python dicts so enums can be referenced directly.

Simulated for demonstration purposes -- not real financial products.
"""

from loandesk_db.enums import FieldKind, FieldWidth, LoanType

CATEGORIES = [
    {"name": "Personal Loans", "description": "Unsecured loans for everyday needs."},
    {"name": "Business Loans", "description": "Working capital and expansion finance."},
    {"name": "Vehicle Loans", "description": "Finance for new and used vehicles."},
]

REQUIRED_DOCUMENTS = [
    {"name": "Identity proof", "description": "Passport, national ID or driving licence", "required": True},
    {"name": "Address proof", "description": "Utility bill or rental agreement", "required": True},
    {"name": "Income proof", "description": "Last three salary slips or ITR", "required": True},
    {"name": "Bank statement", "description": "Last six months", "required": False},
]

LOANS = [
    {
        "category": "Personal Loans",
        "name": "Quick Personal Loan",
        "loan_type": LoanType.PERSONAL,
        "description": "Short-term personal loan with same-week disbursal.",
        "interest_rate_min": 12.0,
        "interest_rate_max": 24.0,
        "interest_rate_default": 18.0,
        "min_loan_amount": 10000,
        "max_loan_amount": 500000,
        "min_tenure": 3,
        "max_tenure": 36,
        "features": [
            {"title": "Fast approval", "description": "Decisions within 48 hours"},
            {"title": "No collateral", "description": "Fully unsecured"},
        ],
        "benefits": [{"title": "Flexible tenure", "description": "3 to 36 months"}],
        "repayment_options": [
            {"tenure": 12, "interest_rate": 18.0, "emi": 4584},
            {"tenure": 24, "interest_rate": 18.0, "emi": 2496},
        ],
        "display_order": 1,
    },
    {
        "category": "Business Loans",
        "name": "Small Business Working Capital",
        "loan_type": LoanType.BUSINESS,
        "description": "Working capital line for small and medium businesses.",
        "interest_rate_min": 14.0,
        "interest_rate_max": 22.0,
        "interest_rate_default": 16.5,
        "min_loan_amount": 50000,
        "max_loan_amount": 2000000,
        "min_tenure": 6,
        "max_tenure": 48,
        "features": [{"title": "Revolving limit", "description": "Draw down as needed"}],
        "benefits": [],
        "repayment_options": [],
        "display_order": 2,
    },
    {
        "category": "Vehicle Loans",
        "name": "Two-Wheeler Loan",
        "loan_type": LoanType.VEHICLE,
        "description": "Finance up to 90% of the on-road price.",
        "interest_rate_min": 9.5,
        "interest_rate_max": 15.0,
        "interest_rate_default": None,
        "min_loan_amount": 20000,
        "max_loan_amount": 300000,
        "min_tenure": 6,
        "max_tenure": 36,
        "features": [],
        "benefits": [],
        "repayment_options": [],
        "display_order": 3,
    },
]

FORM_FIELDS = [
    {
        "category": "Personal Loans",
        "name": "employerName",
        "label": "Employer name",
        "kind": FieldKind.TEXT,
        "required": True,
        "width": FieldWidth.HALF,
        "section": "employment",
        "display_order": 1,
    },
    {
        "category": "Personal Loans",
        "name": "monthlyIncome",
        "label": "Monthly income",
        "kind": FieldKind.NUMBER,
        "required": True,
        "width": FieldWidth.HALF,
        "section": "employment",
        "display_order": 2,
    },
    {
        "category": "Personal Loans",
        "name": "employmentType",
        "label": "Employment type",
        "kind": FieldKind.SELECT,
        "options": ["Salaried", "Self-employed", "Retired"],
        "required": True,
        "width": FieldWidth.HALF,
        "section": "employment",
        "display_order": 3,
    },
    {
        "category": "Business Loans",
        "name": "businessName",
        "label": "Registered business name",
        "kind": FieldKind.TEXT,
        "required": True,
        "section": "employment",
        "display_order": 1,
    },
    {
        "category": "Business Loans",
        "name": "gstCertificate",
        "label": "GST certificate",
        "kind": FieldKind.FILE,
        "required": False,
        "section": "documents",
        "display_order": 2,
    },
    {
        "category": "Vehicle Loans",
        "name": "vehicleModel",
        "label": "Vehicle model",
        "kind": FieldKind.TEXT,
        "required": True,
        "section": "loanDetails",
        "display_order": 1,
    },
]
