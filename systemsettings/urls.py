from django.urls import path

from systemsettings.views import (
    SystemSettingListCreateView,
    SystemSettingDetailView,
)

app_name = "systemsettings"

urlpatterns = [
    path("", SystemSettingListCreateView.as_view(), name="settings"),
    path("<str:key>/", SystemSettingDetailView.as_view(), name="setting-detail"),
]
