from django.urls import path
from . import views

urlpatterns = [
    path('reports/sales-summary/', views.sales_summary, name='sales-summary'),
    path('reports/sales-summary/export/', views.sales_export_csv, name='sales-export-csv'),
    path('reports/dashboard/', views.dashboard, name='reports-dashboard'),
]
