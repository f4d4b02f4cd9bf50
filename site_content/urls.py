from django.urls import path

from .category import EditCategoryAPIView, SaveCategoryAPIView, ShowCategoryAPIView
from .content import ContentAPIView, ContentBulkAPIView, ContentHealthAPIView, ContentSectionAPIView
from .gallery import GalleryAPIView, ShowGalleryAPIView
from .product import EditProductAPIView, SaveProductAPIView, ShowMenuAPIView, ShowProductsAPIView
from .site_details import EditSocialLinkAPIView, SaveSiteSettingAPIView, ShowSiteSettingsAPIView, SocialLinksAPIView

urlpatterns = [
    # Whole document
    path('content/', ContentAPIView.as_view(), name='content'),
    path('content/bulk/', ContentBulkAPIView.as_view(), name='content-bulk'),
    path('content/health/', ContentHealthAPIView.as_view(), name='content-health'),
    path('content/menu/', ShowMenuAPIView.as_view(), name='content-menu'),

    # Categories
    path('content/categories/all/', ShowCategoryAPIView.as_view(), name='show-categories'),
    path('content/categories/', SaveCategoryAPIView.as_view(), name='save-category'),
    path('content/categories/<str:category_id>/', EditCategoryAPIView.as_view(), name='edit-category'),

    # Products
    path('content/products/all/', ShowProductsAPIView.as_view(), name='show-products'),
    path('content/products/', SaveProductAPIView.as_view(), name='save-product'),
    path('content/products/<str:product_id>/', EditProductAPIView.as_view(), name='edit-product'),

    # Gallery
    path('content/gallery/all/', ShowGalleryAPIView.as_view(), name='show-gallery'),
    path('content/gallery/', GalleryAPIView.as_view(), name='gallery'),

    # Settings & footer
    path('content/settings/all/', ShowSiteSettingsAPIView.as_view(), name='show-settings'),
    path('content/settings/', SaveSiteSettingAPIView.as_view(), name='save-setting'),
    path('content/footer/social-links/', SocialLinksAPIView.as_view(), name='social-links'),
    path('content/footer/social-links/<str:link_id>/', EditSocialLinkAPIView.as_view(), name='edit-social-link'),

    # Single section; keep last so the routes above win
    path('content/<str:content_type>/', ContentSectionAPIView.as_view(), name='content-section'),
]
