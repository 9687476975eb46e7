from django.urls import path
from .views import MomoCreatePaymentView, MomoReturnView, MomoIPNView

urlpatterns = [
    path('momo/create/', MomoCreatePaymentView.as_view(), name='momo-create'),
    path('momo/return/', MomoReturnView.as_view(), name='momo-return'),
    path('momo/ipn/', MomoIPNView.as_view(), name='momo-ipn'),
]
