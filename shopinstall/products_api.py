import logging
from dataclasses import dataclass

import requests
import zope.interface

from .errors import UpstreamQueryFailed
from .interfaces import IProductsAPI


logger = logging.getLogger(__name__)


PRODUCTS_QUERY = """
query {
  products(first: 10) {
    edges {
      node {
        id
        title
        description
        handle
        priceRangeV2 {
          minVariantPrice {
            amount
            currencyCode
          }
          maxVariantPrice {
            amount
            currencyCode
          }
        }
        images(first: 5) {
          edges {
            node {
              id
              url
              altText
              width
              height
            }
          }
        }
        variants(first: 10) {
          edges {
            node {
              id
              title
              price
              sku
              availableForSale
            }
          }
        }
      }
    }
    pageInfo {
      hasNextPage
      endCursor
    }
  }
}
"""


@zope.interface.implementer(IProductsAPI)
@dataclass
class ProductsAPIService:
    """Helps with reading a shop's product catalog through the graphql admin api."""

    api_version: str

    timeout: float = 30

    api_url: str = "https://{shop_host}/admin/api/{api_version}/graphql.json"

    products_query: str = PRODUCTS_QUERY

    def get_api_url(self, shop_host):
        return self.api_url.format(shop_host=shop_host, api_version=self.api_version)

    def fetch_products(self, shop_host, access_token):
        return self.execute_graphql(shop_host, access_token, self.products_query, {})

    def execute_graphql(self, shop_host, access_token, query, variables=None):
        """
        Post the query and hand back the response body as is.

        raise:
            UpstreamQueryFailed if the request fails or shopify answers with
            a non 200 status.  The message holds shopify's `errors` list when
            the response had one.
        """
        try:
            res = requests.post(
                self.get_api_url(shop_host),
                json={"query": query, "variables": variables or {}},
                headers={
                    "Content-Type": "application/json",
                    "X-Shopify-Access-Token": access_token,
                },
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            logger.error(f"Error fetching products for {shop_host}: {e}")
            raise UpstreamQueryFailed()

        if res.status_code == requests.codes.ok:
            try:
                return res.json()
            except ValueError:
                logger.error(
                    f"Products response for {shop_host} was not json: {res.text}"
                )
                raise UpstreamQueryFailed()

        logger.error(
            f"Error fetching products for {shop_host}: {res.status_code} {res.text}"
        )
        try:
            body = res.json()
        except ValueError:
            body = None
        errors = body.get("errors") if isinstance(body, dict) else None
        raise UpstreamQueryFailed.from_errors(errors)
