"""
Discipleship URL configuration.
"""
from django.urls import path
from discipleship.api import cases, confraternizacoes, modules, queue

urlpatterns = [
    # Cases
    path('cases/', cases.CaseListCreateView.as_view()),
    path('cases/<uuid:case_id>', cases.CaseDetailView.as_view()),
    path('cases/<uuid:case_id>/attempts', cases.ContactAttemptView.as_view()),
    path('cases/<uuid:case_id>/transitions', cases.CaseTransitionView.as_view()),
    path('cases/<uuid:case_id>/confraternizacao', cases.CaseConfraternizacaoView.as_view()),
    path('cases/<uuid:case_id>/modules', modules.CaseEnrollView.as_view()),

    # Modules & progress
    path('modules/', modules.ModuleListCreateView.as_view()),
    path('progress/<uuid:progress_id>', modules.ProgressDetailView.as_view()),

    # Confraternizações
    path('confraternizacoes/', confraternizacoes.ConfraternizacaoListCreateView.as_view()),
    path('confraternizacoes/active', confraternizacoes.ActiveConfraternizacaoView.as_view()),

    # Queue
    path('queue/', queue.QueueView.as_view()),
    path('queue/workload', queue.WorkloadView.as_view()),
    path('criticality/refresh', queue.CriticalityRefreshView.as_view()),
]
