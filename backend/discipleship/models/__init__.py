from discipleship.models.member import Member
from discipleship.models.confraternizacao import Confraternizacao
from discipleship.models.module import DiscipleshipModule, ModuleProgress
from discipleship.models.case import DiscipleshipCase
from discipleship.models.contact_attempt import ContactAttempt
from discipleship.models.case_event import CaseEvent

__all__ = [
    "Member", "Confraternizacao", "DiscipleshipModule", "ModuleProgress",
    "DiscipleshipCase", "ContactAttempt", "CaseEvent",
]
