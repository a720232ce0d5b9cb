"""FSM conversation states."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List


class Step(str, Enum):
    WAITING_REEL     = "waiting_reel"
    WAITING_CATEGORY = "waiting_category"
    ADDING_CATEGORY  = "adding_category"
    WAITING_USE_CASE = "waiting_use_case"
    WAITING_EXTRA    = "waiting_extra"


@dataclass
class ConversationRecord:
    """Progress of one chat through the reel form."""
    step: Step = Step.WAITING_REEL
    media_url: str = ""
    category: str = ""
    use_case: str = ""
    extra_link: str = ""
    # Categories last offered as buttons; button payloads carry an index into it.
    categories: List[str] = field(default_factory=list)
    # Changes whenever the list is refetched, so old keyboards stop resolving.
    menu_id: str = ""

    def as_dict(self) -> Dict[str, str]:
        return {
            "step":      self.step.value,
            "mediaUrl":  self.media_url,
            "category":  self.category,
            "useCase":   self.use_case,
            "extraLink": self.extra_link,
        }
