"""Tests for grouping bucket objects into albums."""

import pytest

from conftest import obj
from portfolio_gallery.albums.aggregator import album_year, build_albums, natural_key, summarize
from portfolio_gallery.albums.config import MediaType, split_thumbnail_name

BUCKET = "test-bucket"


def albums_by_name(albums):
    return {album.name: album for album in albums}


class TestMediaType:
    """Test media type detection."""

    @pytest.mark.parametrize(
        "file_name,content_type,expected",
        [
            ("clip.jpg", "video/mp4", MediaType.VIDEO),
            ("photo.bin", "image/png", MediaType.IMAGE),
            ("photo.JPG", None, MediaType.IMAGE),
            ("photo.heic", "application/octet-stream", MediaType.IMAGE),
            ("movie.MOV", None, MediaType.VIDEO),
            ("notes.txt", "text/plain", MediaType.UNKNOWN),
            ("README", None, MediaType.UNKNOWN),
            ("trailing.", None, MediaType.UNKNOWN),
        ],
    )
    def test_detect(self, file_name, content_type, expected):
        assert MediaType.detect(file_name, content_type) == expected


class TestThumbnailNames:

    def test_strips_suffix(self):
        assert split_thumbnail_name("photo-2_thumbnail.jpg") == ("photo-2.jpg", True)

    def test_original_is_unchanged(self):
        assert split_thumbnail_name("photo-2.jpg") == ("photo-2.jpg", False)

    def test_names_without_extension_are_not_thumbnails(self):
        assert split_thumbnail_name("photo_thumbnail") == ("photo_thumbnail", False)
        assert split_thumbnail_name("_thumbnail.") == ("_thumbnail.", False)


class TestBuildAlbums:
    """Test album grouping, pairing and summaries."""

    def test_groups_by_first_segment(self, sample_objects):
        albums = build_albums(sample_objects, BUCKET)
        assert [album.name for album in albums] == ["Iceland-2023", "Japan-2019", "Street"]

    def test_skips_root_files_directories_and_ds_store(self, sample_objects):
        albums = albums_by_name(build_albums(sample_objects, BUCKET))
        street_paths = [item.canonical_path for item in albums["Street"].items]
        assert street_paths == ["Street/night.png", "Street/notes.txt"]
        assert "root-file.jpg" not in albums

    def test_ds_store_in_any_segment_is_skipped(self):
        albums = build_albums([obj("Trip/.ds_store/a.jpg"), obj("Trip/b.jpg")], BUCKET)
        assert [item.name for item in albums[0].items] == ["b.jpg"]

    def test_empty_album_segment_is_skipped(self):
        assert build_albums([obj("/a.jpg"), obj("")], BUCKET) == []

    def test_thumbnail_pairs_with_original(self, sample_objects):
        japan = albums_by_name(build_albums(sample_objects, BUCKET))["Japan-2019"]
        assert japan.item_count == 2
        item = japan.items[0]
        assert item.name == "photo-2.jpg"
        assert item.canonical_path == "Japan-2019/photo-2.jpg"
        assert item.display_url == "/Japan-2019/photo-2_thumbnail.jpg"
        assert item.link_url == "https://storage.googleapis.com/test-bucket/Japan-2019/photo-2.jpg"
        assert item.last_modified.hour == 10

    def test_original_without_thumbnail_displays_itself(self, sample_objects):
        japan = albums_by_name(build_albums(sample_objects, BUCKET))["Japan-2019"]
        item = japan.items[1]
        assert item.display_url == "/Japan-2019/photo-10.jpg"
        assert item.link_url.endswith("/Japan-2019/photo-10.jpg")

    def test_thumbnail_without_original(self):
        albums = build_albums([obj("Trip/a_thumbnail.jpg", "image/jpeg", size=42)], BUCKET)
        item = albums[0].items[0]
        assert item.name == "a.jpg"
        assert item.canonical_path == "Trip/a_thumbnail.jpg"
        assert item.display_url == "/Trip/a_thumbnail.jpg"
        assert item.link_url.endswith("/Trip/a_thumbnail.jpg")
        assert item.size_bytes == 42

    def test_pairing_is_order_independent(self):
        thumbnail = obj("Trip/a_thumbnail.jpg", "image/jpeg", "2020-01-02T00:00:00", size=10)
        original = obj("Trip/a.jpg", "image/jpeg", "2020-01-01T00:00:00", size=1000)
        first = build_albums([thumbnail, original], BUCKET)
        second = build_albums([original, thumbnail], BUCKET)
        assert first == second
        item = first[0].items[0]
        assert item.size_bytes == 1000
        assert item.display_url == "/Trip/a_thumbnail.jpg"

    def test_original_fields_win_over_thumbnail(self):
        albums = build_albums(
            [obj("Trip/a.jpg", None, None, size=0), obj("Trip/a_thumbnail.jpg", "image/jpeg", "2020-01-02T00:00:00", size=10)],
            BUCKET,
        )
        item = albums[0].items[0]
        # The original has no timestamp or size, so the thumbnail fills them
        assert item.size_bytes == 10
        assert item.content_type == "image/jpeg"
        assert item.last_modified is not None

    def test_videos_are_not_paired(self):
        albums = build_albums(
            [obj("Trip/clip.mp4", "video/mp4"), obj("Trip/clip_thumbnail.mp4", "video/mp4")],
            BUCKET,
        )
        assert albums[0].item_count == 2
        assert albums[0].video_count == 2

    def test_items_sorted_numerically(self):
        keys = ["Trip/photo-10.jpg", "Trip/photo-2.jpg", "Trip/photo-1.jpg"]
        albums = build_albums([obj(key) for key in keys], BUCKET)
        assert [item.name for item in albums[0].items] == ["photo-1.jpg", "photo-2.jpg", "photo-10.jpg"]

    def test_counts_add_up(self, sample_objects):
        for album in build_albums(sample_objects, BUCKET):
            unknown = sum(1 for item in album.items if item.media_type == MediaType.UNKNOWN)
            assert album.item_count == album.image_count + album.video_count + unknown
            assert album.item_count == len(album.items)

    def test_timestamps(self):
        albums = build_albums(
            [
                obj("Trip/a.jpg", updated="2020-01-01T00:00:00"),
                obj("Trip/b.jpg", updated="2020-01-03T00:00:00"),
                obj("Trip/c.jpg", updated=None),
            ],
            BUCKET,
        )
        album = albums[0]
        assert album.most_recent_update.day == 3
        # Missing timestamps are left out of the mean rather than counted as zero
        assert album.average_update.day == 2

    def test_public_base_url_override(self):
        albums = build_albums([obj("Trip/a.jpg")], BUCKET, public_base_url="https://cdn.example.com/")
        assert albums[0].items[0].link_url == "https://cdn.example.com/Trip/a.jpg"

    def test_summary(self, sample_objects):
        summary = summarize(build_albums(sample_objects, BUCKET))
        assert summary.to_dict() == {"albumCount": 3, "photoCount": 5, "videoCount": 1, "itemCount": 7}

    def test_summary_of_nothing(self):
        assert summarize([]).to_dict() == {"albumCount": 0, "photoCount": 0, "videoCount": 0, "itemCount": 0}


class TestCoverSelection:

    def test_cover_file_wins(self):
        albums = build_albums([obj("Trip/a.jpg"), obj("Trip/album-cover.jpg"), obj("Trip/b.jpg")], BUCKET)
        assert albums[0].cover_item.name == "album-cover.jpg"

    def test_cover_name_is_case_insensitive(self):
        albums = build_albums([obj("Trip/a.jpg"), obj("Trip/Album-Cover.PNG")], BUCKET)
        assert albums[0].cover_item.name == "Album-Cover.PNG"

    def test_falls_back_to_first_image(self):
        albums = build_albums([obj("Trip/clip.mp4"), obj("Trip/z.jpg"), obj("Trip/b.jpg")], BUCKET)
        assert albums[0].cover_item.name == "b.jpg"

    def test_non_image_cover_loses_to_an_image(self):
        albums = build_albums([obj("Trip/album-cover.jpg", "video/mp4"), obj("Trip/z.jpg")], BUCKET)
        assert albums[0].cover_item.name == "z.jpg"

    def test_non_image_cover_used_when_no_images(self):
        albums = build_albums([obj("Trip/a.mp4"), obj("Trip/album-cover.jpg", "video/mp4")], BUCKET)
        assert albums[0].cover_item.name == "album-cover.jpg"

    def test_falls_back_to_first_item(self):
        albums = build_albums([obj("Trip/b.mov"), obj("Trip/a.mov")], BUCKET)
        assert albums[0].cover_item.name == "a.mov"


class TestAlbumOrder:

    def test_year_descending_then_yearless(self):
        objects = [
            obj("Misc/a.jpg", updated="2025-01-01T00:00:00"),
            obj("Japan-2019/a.jpg", updated="2010-01-01T00:00:00"),
            obj("Iceland-2023/a.jpg", updated="2000-01-01T00:00:00"),
        ]
        assert [a.name for a in build_albums(objects, BUCKET)] == ["Iceland-2023", "Japan-2019", "Misc"]

    def test_equal_years_fall_back_to_average_update(self):
        objects = [
            obj("Spring 2022/a.jpg", updated="2022-03-01T00:00:00"),
            obj("Autumn 2022/a.jpg", updated="2022-10-01T00:00:00"),
        ]
        assert [a.name for a in build_albums(objects, BUCKET)] == ["Autumn 2022", "Spring 2022"]

    def test_yearless_albums_by_average_then_name(self):
        objects = [
            obj("Older/a.jpg", updated="2020-01-01T00:00:00"),
            obj("Newer/a.jpg", updated="2021-01-01T00:00:00"),
            obj("Undated 10/a.jpg"),
            obj("Undated 2/a.jpg"),
        ]
        assert [a.name for a in build_albums(objects, BUCKET)] == ["Newer", "Older", "Undated 2", "Undated 10"]

    def test_average_breaks_ties_before_most_recent(self):
        objects = [
            # Latest photo is newer, but the average is older
            obj("A/1.jpg", updated="2020-01-01T00:00:00"),
            obj("A/2.jpg", updated="2020-12-31T00:00:00"),
            obj("B/1.jpg", updated="2020-08-01T00:00:00"),
        ]
        assert [a.name for a in build_albums(objects, BUCKET)] == ["B", "A"]

    @pytest.mark.parametrize(
        "name,year",
        [("Iceland-2023", 2023), ("2019 Japan", 2019), ("Trip_2023", None), ("12345", None), ("Misc", None)],
    )
    def test_album_year(self, name, year):
        assert album_year(name) == year


def test_natural_key_orders_digit_runs():
    names = ["photo-10", "Photo-9", "photo-1", "alpha"]
    assert sorted(names, key=natural_key) == ["alpha", "photo-1", "Photo-9", "photo-10"]
