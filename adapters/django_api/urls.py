"""
Rewardify Django adapter URL routing.
"""

from django.urls import path

from adapters.django_api import views


urlpatterns = [
    path("transactions", views.transactions_view),
    path("transactions/update", views.transactions_update_view),
    path("transactions/delete", views.transactions_delete_view),
    path("transactions/detail", views.transactions_detail_view),
    path("rewards/policy", views.reward_policy_view),
    path("customers", views.customers_view),
    path("customers/update", views.customers_update_view),
    path("customers/delete", views.customers_delete_view),
    path("customers/rewards", views.customers_rewards_view),
    path("giftcards", views.gift_cards_view),
    path("giftcards/update", views.gift_cards_update_view),
    path("giftcards/delete", views.gift_cards_delete_view),
    path("promotions", views.promotions_view),
    path("promotions/update", views.promotions_update_view),
    path("promotions/delete", views.promotions_delete_view),
    path("overview", views.overview_view),
    path("invoices/<str:reference>", views.invoice_view),
]
