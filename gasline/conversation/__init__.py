from gasline.conversation.drafts import OrderDraft, ProductKind
from gasline.conversation.interrupts import InterruptPipeline
from gasline.conversation.session import SessionContext, SessionRegistry
from gasline.conversation.states import ConversationState, Transition, goto, settle, stay

__all__ = [
    "ConversationState",
    "Transition",
    "goto",
    "settle",
    "stay",
    "OrderDraft",
    "ProductKind",
    "SessionContext",
    "SessionRegistry",
    "InterruptPipeline",
]
