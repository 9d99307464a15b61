from django.urls import path
from .views import UploadTechniqueView, TechniqueDetailView, TechniqueListView

urlpatterns = [
    path("techniques/", TechniqueListView.as_view(), name="technique_list"),
    path("techniques/upload/", UploadTechniqueView.as_view(), name="technique_upload"),
    path("techniques/<uuid:technique_id>/", TechniqueDetailView.as_view(), name="technique_detail"),
]
