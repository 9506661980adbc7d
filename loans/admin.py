from django.contrib import admin

from loans.models import Loan


class LoanAdmin(admin.ModelAdmin):
    list_display = (
        "reference",
        "user",
        "amount",
        "interest_rate",
        "total_amount",
        "status",
        "due_date",
    )
    search_fields = ("reference", "user__email")
    list_filter = ("status", "created_at", "updated_at")
    ordering = ("-created_at",)


admin.site.register(Loan, LoanAdmin)
