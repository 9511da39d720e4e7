"""
Pagination for order lists.

Page-number pagination keeps totals available for dashboards; lists are
ordered newest first by the service layer.
"""

from rest_framework.pagination import PageNumberPagination


class OrderPagination(PageNumberPagination):
    """
    Default: 20 orders per page
    Maximum: 100 orders per page
    """

    page_size = 20
    max_page_size = 100
    page_size_query_param = "page_size"
