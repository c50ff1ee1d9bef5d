from enum import Enum


class ReaddPolicy(str, Enum):
    """What an Add does when its order id is already resident."""
    OVERWRITE = "overwrite"  # Replace the index entry, leave the old record in its level
    MIGRATE = "migrate"  # Remove the old record first, then insert
    REJECT = "reject"  # Ignore the add


class CancelDepthPolicy(str, Enum):
    """How the depth of a Cancel snapshot is resolved."""
    AFTER_REMOVAL = "after_removal"  # Lookup after the order is gone; always 0
    BEFORE_REMOVAL = "before_removal"  # Rank of the level the order rested at
