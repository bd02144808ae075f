from django.urls import path

from .views import (
    CartItemDetailView,
    CartItemListView,
    CartMergeGuestView,
    CartSyncView,
    CartView,
    GuestCartView,
)

urlpatterns = [
    path("", CartView.as_view(), name="api-cart"),
    path("items/", CartItemListView.as_view(), name="api-cart-items"),
    path("items/<str:item_id>/", CartItemDetailView.as_view(), name="api-cart-item-detail"),
    path("sync/", CartSyncView.as_view(), name="api-cart-sync"),
    path("merge-guest/", CartMergeGuestView.as_view(), name="api-cart-merge-guest"),
    path("guest/", GuestCartView.as_view(), name="api-cart-guest"),
]
