"""Read-time progress aggregate for a case: never stored, so it cannot drift."""
from dataclasses import dataclass

from discipleship.models.choices import ProgressStatus
from discipleship.models.module import ModuleProgress


@dataclass(frozen=True)
class ProgressSummary:
    total_modules: int
    done_modules: int

    @property
    def progress_percent(self) -> int:
        if self.total_modules == 0:
            return 0
        return round(100 * self.done_modules / self.total_modules)

    @property
    def is_complete(self) -> bool:
        return self.total_modules > 0 and self.done_modules == self.total_modules

    def to_dict(self) -> dict:
        return {
            "total_modules": self.total_modules,
            "done_modules": self.done_modules,
            "progress_percent": self.progress_percent,
        }


def summarize_progress(rows) -> ProgressSummary:
    statuses = [row.status for row in rows]
    return ProgressSummary(
        total_modules=len(statuses),
        done_modules=sum(1 for status in statuses if status == ProgressStatus.CONCLUIDO),
    )


def progress_summary(case) -> ProgressSummary:
    return summarize_progress(ModuleProgress.objects.filter(case_id=case.id).only("status"))
