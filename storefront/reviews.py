"""Product reviews. Each user may review a product once."""

import logging

from .errors import NotFoundError, ValidationError
from .helpers import round_to_decimals
from .models import ProductUpdate, Review, ReviewUpdate
from .responses import serialize
from .validators import error, parse_int, validate_rating, validate_required_field

log = logging.getLogger(__name__)


def review_stats(reviews):
    distribution = {1: 0, 2: 0, 3: 0, 4: 0, 5: 0}
    if not reviews:
        return {'totalReviews': 0, 'averageRating': 0, 'ratingDistribution': distribution}
    for review in reviews:
        distribution[review.rating] = distribution.get(review.rating, 0) + 1
    average = sum(r.rating for r in reviews) / len(reviews)
    return {
        'totalReviews': len(reviews),
        'averageRating': round_to_decimals(average, 1),
        'ratingDistribution': distribution,
    }


class ReviewService:

    def __init__(self, store):
        self.store = store

    def get(self, review_id):
        review = self.store.find_by_id('reviews', review_id)
        if not review:
            raise NotFoundError('Review', review_id)
        return review

    def for_product(self, product_id):
        if not self.store.find_by_id('products', product_id):
            raise NotFoundError('Product', product_id)
        reviews = self.store.filter('reviews', product_id=product_id)
        reviews.sort(key=lambda r: r.created_at, reverse=True)
        return reviews

    def enrich(self, review):
        user = self.store.find_by_id('users', review.user_id)
        product = self.store.find_by_id('products', review.product_id)
        return dict(
            serialize(review),
            userName=user.name if user else 'Anonymous',
            productName=product.name if product else 'Unknown',
        )

    def _refresh_product_rating(self, product_id):
        reviews = self.store.filter('reviews', product_id=product_id)
        stats = review_stats(reviews)
        self.store.update('products', product_id, ProductUpdate(
            average_rating=stats['averageRating'],
            review_count=stats['totalReviews'],
        ))

    def create(self, data):
        errors = []
        if not validate_required_field(data.get('userId')):
            errors.append(error('userId', 'User ID is required'))
        if not validate_required_field(data.get('productId')):
            errors.append(error('productId', 'Product ID is required'))
        if not validate_rating(data.get('rating')):
            errors.append(error('rating', 'Rating must be between 1 and 5'))
        if errors:
            raise ValidationError(errors)

        with self.store.transaction():
            if not self.store.find_by_id('products', data['productId']):
                raise NotFoundError('Product', data['productId'])
            # duplicate (userId, productId) -> ConflictError from the store index
            review = self.store.insert('reviews', Review(
                user_id=data['userId'],
                product_id=data['productId'],
                rating=parse_int(data['rating']),
                title=data.get('title') or '',
                content=data.get('content') or '',
                updated_at=None,
            ))
            self._refresh_product_rating(review.product_id)
        log.info('review %s: %s rated %s by %s', review.id, review.product_id, review.rating, review.user_id)
        return review

    def update(self, review_id, data):
        changes = ReviewUpdate()
        if 'rating' in data:
            if not validate_rating(data['rating']):
                raise ValidationError([error('rating', 'Rating must be between 1 and 5')])
            changes.rating = parse_int(data['rating'])
        if 'title' in data:
            changes.title = data['title']
        if 'content' in data:
            changes.content = data['content']
        with self.store.transaction():
            review = self.get(review_id)
            updated = self.store.update('reviews', review_id, changes)
            self._refresh_product_rating(review.product_id)
        log.info('review %s updated', review_id)
        return updated

    def delete(self, review_id):
        with self.store.transaction():
            review = self.get(review_id)
            deleted = self.store.delete('reviews', review_id)
            self._refresh_product_rating(review.product_id)
        log.info('review %s deleted', review_id)
        return deleted

    def mark_helpful(self, review_id):
        with self.store.transaction():
            review = self.get(review_id)
            return self.store.update('reviews', review_id, ReviewUpdate(helpful_count=review.helpful_count + 1))
