from src.domain import invitation_token


def test_issued_tokens_are_unique_and_well_formed():
    tokens = {invitation_token.issue_token() for _ in range(50)}

    assert len(tokens) == 50
    assert all(invitation_token.is_well_formed(t) for t in tokens)


def test_malformed_tokens():
    assert not invitation_token.is_well_formed(None)
    assert not invitation_token.is_well_formed("")
    assert not invitation_token.is_well_formed("short")
    assert not invitation_token.is_well_formed("a" * 40 + "/../etc")
    assert not invitation_token.is_well_formed("a" * 65)


def test_mask_keeps_first_eight_characters():
    token = invitation_token.issue_token()

    assert invitation_token.mask(token) == token[:8] + "..."
    assert token not in invitation_token.mask(token)


def test_claim_link():
    link = invitation_token.build_claim_link(
        "https://hr.example.com/", "/employee-signup", "abc_DEF-123"
    )
    assert link == "https://hr.example.com/employee-signup?token=abc_DEF-123"
