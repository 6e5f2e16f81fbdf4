"""URL configuration for assets app."""

from django.urls import path

from server.apps.assets import views

app_name = 'assets'

urlpatterns = [
    path('advanced-search/', views.advanced_search, name='advanced-search'),
    path('recycle-bin/', views.recycle_bin, name='recycle-bin'),
]
