from django.urls import path
from . import views

app_name = 'products'

urlpatterns = [
    path('product/<slug:slug>/', views.product_detail, name='detail'),
    path('product/<slug:slug>/options/', views.product_options, name='options'),
    path('product/<slug:slug>/variationprice/', views.variation_price, name='variation_price'),
    path('product/<slug:slug>/add/', views.add_to_cart, name='add'),

    # Must stay last, it matches any path
    path('<path:path>/', views.product_in_tree, name='tree_detail'),
]
