from django.urls import path

from loans.views import (
    LoanListCreateView,
    LoanDetailView,
    LoanCalculateView,
    LoanRepayView,
    AdminLoanListView,
    ApproveLoanView,
    RejectLoanView,
)

app_name = "loans"

urlpatterns = [
    path("", LoanListCreateView.as_view(), name="loan-list-create"),
    path("calculate/", LoanCalculateView.as_view(), name="loan-calculate"),
    path("admin/", AdminLoanListView.as_view(), name="admin-loan-list"),
    path(
        "admin/<str:reference>/approve/",
        ApproveLoanView.as_view(),
        name="approve-loan",
    ),
    path(
        "admin/<str:reference>/reject/",
        RejectLoanView.as_view(),
        name="reject-loan",
    ),
    path("<str:reference>/", LoanDetailView.as_view(), name="loan-detail"),
    path("<str:reference>/repay/", LoanRepayView.as_view(), name="repay-loan"),
]
