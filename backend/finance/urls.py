from django.urls import path

from . import views

urlpatterns = [
    path('', views.FinancialRecordListView.as_view(), name='financial_record_list'),
    path('reports/summary/', views.FinancialSummaryView.as_view(), name='financial_summary'),
    path('<int:pk>/', views.FinancialRecordDetailView.as_view(), name='financial_record_detail'),
    path('<int:pk>/payments/', views.PaymentCreateView.as_view(), name='financial_record_payments'),
    path('<int:pk>/receipts/<int:index>/', views.ReceiptView.as_view(), name='financial_record_receipt'),
]
