"""Products and categories."""

import logging

from .config import CATALOG_DISCOUNT, FEATURED_MAX_STOCK, FEATURED_MIN_PRICE, LOW_STOCK_THRESHOLD
from .errors import NotFoundError, StateError, ValidationError
from .helpers import format_price, slugify
from .models import Category, CategoryUpdate, Product, ProductUpdate
from .responses import serialize
from .validators import (
    error, parse_float, parse_int, require, validate_price, validate_product,
    validate_required_field, validate_stock,
)

log = logging.getLogger(__name__)


def availability_status(stock):
    if stock == 0:
        return 'out_of_stock'
    if stock < LOW_STOCK_THRESHOLD:
        return 'low_stock'
    return 'in_stock'


def relevance(product, query):
    name = product.name.lower()
    query = query.lower()
    score = 0
    if name.startswith(query):
        score += 10
    if query in name:
        score += 5
    return score


class ProductService:

    def __init__(self, store):
        self.store = store

    def get(self, product_id):
        product = self.store.find_by_id('products', product_id)
        if not product:
            raise NotFoundError('Product', product_id)
        return product

    def list(self):
        return self.store.find_all('products')

    def format(self, product):
        return dict(serialize(product), formattedPrice=format_price(product.price))

    def featured(self):
        return [
            p for p in self.list()
            if p.price > FEATURED_MIN_PRICE or p.stock < FEATURED_MAX_STOCK
        ]

    def by_category(self, category_id):
        return self.store.filter('products', category_id=category_id)

    def search(self, query=None, category=None, min_price=None, max_price=None):
        products = self.list()
        if query:
            products = [p for p in products if query.lower() in p.name.lower()]
        if category:
            products = [p for p in products if p.category_id == category]
        min_price = parse_float(min_price)
        if min_price is not None:
            products = [p for p in products if p.price >= min_price]
        max_price = parse_float(max_price)
        if max_price is not None:
            products = [p for p in products if p.price <= max_price]
        if query:
            products.sort(key=lambda p: relevance(p, query), reverse=True)
        return products

    def detail(self, product):
        discounted = product.price * (1 - CATALOG_DISCOUNT)
        return dict(
            serialize(product),
            availability={
                'inStock': product.stock > 0,
                'quantity': product.stock,
                'status': availability_status(product.stock),
            },
            priceInfo={
                'original': format_price(product.price),
                'discounted': format_price(discounted),
                'savings': format_price(product.price - discounted),
            },
        )

    def create(self, data):
        require(validate_product(data))
        product = Product(
            name=data['name'],
            price=parse_float(data['price']),
            category_id=data.get('categoryId') or '',
            stock=parse_int(data['stock']),
            description=data.get('description') or '',
        )
        weight = parse_float(data.get('weight'))
        if weight:
            product.weight = weight
        product = self.store.insert('products', product)
        log.info('product %s created: %s', product.id, product.name)
        return product

    def update(self, product_id, data):
        self.get(product_id)
        errors = []
        changes = ProductUpdate()
        if 'name' in data:
            if not validate_required_field(data['name']):
                errors.append(error('name', 'Product name is required'))
            changes.name = data['name']
        if 'price' in data:
            if not validate_price(data['price']):
                errors.append(error('price', 'Valid price is required'))
            changes.price = parse_float(data['price'])
        if 'stock' in data:
            if not validate_stock(data['stock']):
                errors.append(error('stock', 'Valid stock quantity is required'))
            changes.stock = parse_int(data['stock'])
        if 'categoryId' in data:
            changes.category_id = data['categoryId']
        if 'description' in data:
            changes.description = data['description']
        if 'weight' in data:
            if not validate_price(data['weight']):
                errors.append(error('weight', 'Valid weight is required'))
            changes.weight = parse_float(data['weight'])
        require(errors)
        updated = self.store.update('products', product_id, changes)
        log.info('product %s updated', product_id)
        return updated

    def set_stock(self, product_id, quantity):
        self.get(product_id)
        if not validate_stock(quantity):
            raise ValidationError([error('quantity', 'Valid stock quantity is required')])
        updated = self.store.update('products', product_id, ProductUpdate(stock=parse_int(quantity)))
        log.info('product %s stock set to %s', product_id, updated.stock)
        return updated

    def delete(self, product_id):
        self.get(product_id)
        deleted = self.store.delete('products', product_id)
        log.info('product %s deleted', product_id)
        return deleted


class CategoryService:

    def __init__(self, store):
        self.store = store

    def get(self, category_id):
        category = self.store.find_by_id('categories', category_id)
        if not category:
            raise NotFoundError('Category', category_id)
        return category

    def list(self):
        return self.store.find_all('categories')

    def product_count(self, category_id):
        return len(self.store.filter('products', category_id=category_id))

    def products(self, category_id):
        self.get(category_id)
        return self.store.filter('products', category_id=category_id)

    def enrich(self, category):
        return dict(
            serialize(category),
            productCount=self.product_count(category.id),
            subcategories=serialize(self.store.filter('categories', parent_id=category.id)),
        )

    def tree(self):
        categories = self.list()

        def node(category):
            children = [c for c in categories if c.parent_id == category.id]
            return dict(
                serialize(category),
                productCount=self.product_count(category.id),
                children=[node(child) for child in children],
            )

        return [node(c) for c in categories if not c.parent_id]

    def _check_parent(self, parent_id):
        if parent_id and not self.store.find_by_id('categories', parent_id):
            raise ValidationError([error('parentId', 'Parent category not found')])

    def create(self, data):
        if not validate_required_field(data.get('name')):
            raise ValidationError([error('name', 'Category name is required')])
        self._check_parent(data.get('parentId'))
        category = self.store.insert('categories', Category(
            name=data['name'],
            description=data.get('description') or '',
            parent_id=data.get('parentId') or None,
            slug=slugify(data['name']),
        ))
        log.info('category %s created: %s', category.id, category.name)
        return category

    def update(self, category_id, data):
        self.get(category_id)
        changes = CategoryUpdate()
        if 'name' in data:
            if not validate_required_field(data['name']):
                raise ValidationError([error('name', 'Category name is required')])
            changes.name = data['name']
            changes.slug = slugify(data['name'])
        if 'description' in data:
            changes.description = data['description']
        if 'parentId' in data:
            self._check_parent(data['parentId'])
            changes.parent_id = data['parentId'] or None
        updated = self.store.update('categories', category_id, changes)
        log.info('category %s updated', category_id)
        return updated

    def delete(self, category_id):
        self.get(category_id)
        if self.product_count(category_id) > 0:
            raise StateError('Cannot delete category with products')
        deleted = self.store.delete('categories', category_id)
        log.info('category %s deleted', category_id)
        return deleted
