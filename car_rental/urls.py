from django.contrib import admin
from django.urls import include, path
from django.views.generic import RedirectView

admin.site.site_header = "Car rental back office"
admin.site.site_title = "Car rental"

urlpatterns = [
    path("admin/", admin.site.urls),
    path("accounts/", include("django.contrib.auth.urls")),
    path("api/", include("rentals.urls")),
    path("", RedirectView.as_view(pattern_name="rentals:dashboard", permanent=False)),
]
