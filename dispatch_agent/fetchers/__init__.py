"""News provider clients and the gateway that merges them."""

from .apitube import fetch_apitube_articles, map_apitube_article
from .gateway import ArticleGateway, ProviderCall
from .newsapi import fetch_newsapi_articles, map_newsapi_article

__all__ = [
    "ArticleGateway",
    "ProviderCall",
    "fetch_apitube_articles",
    "fetch_newsapi_articles",
    "map_apitube_article",
    "map_newsapi_article",
]
