import pytest
from sqlalchemy.exc import IntegrityError


@pytest.mark.unit
def test_track_to_dict_lists_artists_in_order(db_session, factories):
    track = factories.TrackFactory(
        isrc="USRC17607839",
        title="Track A",
        image_uri="http://img/a.jpg",
        popularity=50,
        with_artists=["First", "Second"],
    )
    db_session.commit()

    data = track.to_dict()
    assert set(data) == {"id", "image_uri", "title", "artists", "popularity"}
    assert data["title"] == "Track A"
    assert data["image_uri"] == "http://img/a.jpg"
    assert data["popularity"] == 50
    assert data["artists"] == [{"name": "First"}, {"name": "Second"}]
    assert isinstance(data["id"], int)

    assert track.to_dict(include_id=False) == {
        "image_uri": "http://img/a.jpg",
        "title": "Track A",
        "artists": [{"name": "First"}, {"name": "Second"}],
        "popularity": 50,
    }


@pytest.mark.unit
def test_isrc_is_unique(db_session, factories):
    factories.TrackFactory(isrc="DUPLICATE01")
    db_session.commit()

    dup = factories.TrackFactory.build(isrc="DUPLICATE01")
    db_session.add(dup)
    with pytest.raises(IntegrityError):
        db_session.commit()
    db_session.rollback()


@pytest.mark.unit
def test_deleting_track_removes_its_artists(db_session, factories):
    from trackmeta.database.db_manager import Artist, Track

    track = factories.TrackFactory(with_artists=["Gone", "Also Gone"])
    factories.TrackFactory(with_artists=["Stays"])
    db_session.commit()
    assert db_session.query(Artist).count() == 3

    db_session.delete(track)
    db_session.commit()

    assert db_session.query(Track).count() == 1
    assert [a.name for a in db_session.query(Artist).all()] == ["Stays"]


@pytest.mark.unit
def test_artist_factory_attaches_to_owning_track(db_session, factories):
    artist = factories.ArtistFactory(name="Solo")
    db_session.commit()

    assert artist.track is not None
    assert [a.name for a in artist.track.artists] == ["Solo"]
