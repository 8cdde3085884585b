"""
Credit ledger enumerations.
"""

import enum


class TransactionType(str, enum.Enum):
    """Credit transaction kind."""
    SWAP_PAYMENT = "swap_payment"  # Learner pays teacher on settlement
    SIGNUP_BONUS = "signup_bonus"  # System credit on first login
    REFERRAL_BONUS = "referral_bonus"  # System credit for referrals
    ADMIN_ADJUSTMENT = "admin_adjustment"  # Signed manual correction
