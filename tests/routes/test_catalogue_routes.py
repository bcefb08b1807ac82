from datetime import datetime

import pytest
from fastapi import HTTPException

from lifeshield.models.blog import Blog
from lifeshield.models.newsletter import Subscriber
from lifeshield.models.policy import Policy
from lifeshield.models.review import Review
from lifeshield.routes.blog_routes import list_blogs, record_blog_visit
from lifeshield.routes.community_routes import SubscribeRequest, subscribe
from lifeshield.routes.policy_routes import get_policy, list_policies


@pytest.fixture
def policies(db):
    catalogue = [
        Policy(title='Family Health Plus', category='Health', price=45.0, purchased_count=12),
        Policy(title='Senior Health Shield', category='Health', price=60.0, purchased_count=3),
        Policy(title='Critical Health Cover', category='Health', price=30.0, purchased_count=8),
        Policy(title='Term Life 20', category='Life', price=25.0, purchased_count=20),
        Policy(title='Whole Life Secure', category='Life', price=80.0, purchased_count=1),
        Policy(title='Home Guard', category='Property', price=15.0, purchased_count=7),
        Policy(title='Travel Lite', category='Travel', price=5.0, purchased_count=0),
        Policy(title='Auto Basic', category='Vehicle', price=20.0, purchased_count=9),
    ]
    db.add_all(catalogue)
    db.commit()
    return catalogue


def test_popular_policies_returns_top_six_by_purchases(client, policies) -> None:
    response = client.get('/popular-policies')

    assert response.status_code == 200
    counts = [policy['purchased_count'] for policy in response.json()]
    assert counts == [20, 12, 9, 8, 7, 3]


def test_all_policies_pages_within_category(client, policies) -> None:
    response = client.get('/all-policies', params={'category': 'Health', 'page': 0, 'size': 2})

    assert response.status_code == 200
    body = response.json()
    assert len(body['result']) <= 2
    assert body['count'] == 3


def test_all_policies_last_page_holds_remainder(db, policies) -> None:
    page = list_policies(search=None, category='Health', page=1, size=2, db=db)

    assert [policy.title for policy in page.result] == ['Critical Health Cover']
    assert page.count == 3


def test_all_policies_search_is_case_insensitive(db, policies) -> None:
    page = list_policies(search='LIFE', category='All', page=0, size=9, db=db)

    assert sorted(policy.title for policy in page.result) == ['Term Life 20', 'Whole Life Secure']
    assert page.count == 2


@pytest.mark.parametrize(('search', 'expected'), [('_', ['Plan_A']), ('%', ['100% Cover'])])
def test_all_policies_search_treats_wildcards_literally(db, policies, search, expected) -> None:
    db.add_all([Policy(title='Plan_A', category='Life'), Policy(title='100% Cover', category='Health')])
    db.commit()

    page = list_policies(search=search, category='All', page=0, size=20, db=db)

    assert [policy.title for policy in page.result] == expected
    assert page.count == 1


def test_all_policies_defaults_to_nine_per_page(client, db, policies) -> None:
    db.add_all(Policy(title=f'Extra {index}', category='Misc') for index in range(3))
    db.commit()

    response = client.get('/all-policies')

    assert len(response.json()['result']) == 9
    assert response.json()['count'] == 11


def test_all_policies_rejects_bad_paging(client, policies) -> None:
    assert client.get('/all-policies', params={'page': 'first'}).status_code == 400
    assert client.get('/all-policies', params={'size': 0}).status_code == 400


def test_get_policy_by_id(db, policies) -> None:
    assert get_policy(policy_id=str(policies[0].id), db=db).title == 'Family Health Plus'


@pytest.mark.parametrize(('policy_id', 'expected_status'), [('not-an-id', 400), ('9999', 404)])
def test_get_policy_rejects_bad_or_missing_id(db, policies, policy_id, expected_status) -> None:
    with pytest.raises(HTTPException) as exception_info:
        get_policy(policy_id=policy_id, db=db)

    assert exception_info.value.status_code == expected_status


def test_blogs_are_listed_newest_first(db) -> None:
    db.add_all([
        Blog(title='Older', date=datetime(2026, 1, 1)),
        Blog(title='Newest', date=datetime(2026, 3, 1)),
        Blog(title='Middle', date=datetime(2026, 2, 1)),
    ])
    db.commit()

    assert [blog.title for blog in list_blogs(db=db)] == ['Newest', 'Middle', 'Older']


def test_blog_visit_increments_counter(client, db) -> None:
    blog = Blog(title='Why term life?', date=datetime(2026, 1, 1), total_visit=4)
    db.add(blog)
    db.commit()

    response = client.patch(f'/blog/visit/{blog.id}')

    assert response.status_code == 200
    assert response.json()['total_visit'] == 5


def test_blog_visit_for_missing_blog_is_404(db) -> None:
    with pytest.raises(HTTPException) as exception_info:
        record_blog_visit(blog_id='77', db=db)

    assert exception_info.value.status_code == 404


def test_reviews_are_stamped_and_listed_newest_first(client, db) -> None:
    db.add(Review(name='Early', rating=4, feedback='Fine', date=datetime(2026, 1, 1)))
    db.commit()

    created = client.post('/reviews', json={'name': 'Late', 'rating': 5, 'feedback': 'Great'})
    assert created.status_code == 201
    assert created.json()['date'] is not None

    response = client.get('/reviews')

    assert [review['name'] for review in response.json()] == ['Late', 'Early']


def test_review_rating_must_be_between_one_and_five(client) -> None:
    assert client.post('/reviews', json={'name': 'Angry', 'rating': 9}).status_code == 400


def test_newsletter_rejects_duplicate_subscription(db) -> None:
    subscribe(SubscribeRequest(name='Reader', email='Reader@Example.com'), db=db)

    with pytest.raises(HTTPException) as exception_info:
        subscribe(SubscribeRequest(email='reader@example.com'), db=db)

    assert exception_info.value.status_code == 400
    assert exception_info.value.detail == 'Already Subscribed!'


def test_newsletter_reports_duplicate_when_rival_commits_first(db, rival_commits_first) -> None:
    def commit_rival():
        db.add(Subscriber(name='Early', email='reader@example.com'))
        db.commit()

    restore_query = rival_commits_first(commit_rival)

    with pytest.raises(HTTPException) as exception_info:
        subscribe(SubscribeRequest(name='Late', email='reader@example.com'), db=db)

    restore_query()
    assert exception_info.value.status_code == 400
    assert exception_info.value.detail == 'Already Subscribed!'
    assert db.query(Subscriber).filter(Subscriber.email == 'reader@example.com').count() == 1


def test_newsletter_subscription_via_api(client) -> None:
    response = client.post('/newsletter', json={'name': 'Reader', 'email': 'reader@example.com'})

    assert response.status_code == 201
    assert response.json()['email'] == 'reader@example.com'
    assert response.json()['subscribed_at'] is not None


def test_root_reports_running(client) -> None:
    assert client.get('/').json() == {'status': 'Life Shield Server is running...'}
