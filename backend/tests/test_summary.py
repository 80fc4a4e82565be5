from app.services.summary import summarize


def test_summarize_groups():
    rows = [
        ('pending_teacher', 2, 1500),
        ('pending_office', 1, 800),
        ('approved', 1, 400),
        ('ready_for_payment', 1, 250),
        ('completed', 3, 900),
        ('rejected', 2, 5000),
        ('draft', 1, 60),
    ]
    assert summarize(rows) == {
        'pending_count': 3,
        'pending_amount': 2300,
        'used_amount': 900,
        'reserved_amount': 1500 + 800 + 400 + 250 + 60,
    }


def test_summarize_empty():
    assert summarize([]) == {'pending_count': 0, 'pending_amount': 0, 'used_amount': 0, 'reserved_amount': 0}
