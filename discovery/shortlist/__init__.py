"""
Vendor shortlist.

Responsibilities:
- Track the user's cross-category vendor selection for the session.
- Group selected vendors by category for the review step.
- Hand the selection to checkout without clearing it.
"""
