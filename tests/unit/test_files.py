import os
import sys
from unittest.mock import Mock

import pytest

from irc_infra.errors import ObjectKeyCollisionError
from irc_infra.files import collect_site_objects, object_key, walk_files


def _write(path, text='x'):
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text)
    return path


class TestWalkFiles:

    def test_finds_files_at_any_depth(self, tmp_path):
        """Every regular file is returned, however deep"""
        expected = {
            _write(tmp_path / 'a.txt'),
            _write(tmp_path / 'sub' / 'b.txt'),
            _write(tmp_path / 'sub' / 'deeper' / 'still' / 'c.txt'),
        }

        result = walk_files(str(tmp_path))

        assert set(result) == {str(p) for p in expected}

    def test_excludes_directories(self, tmp_path):
        """Empty directories contribute nothing"""
        (tmp_path / 'empty' / 'nested').mkdir(parents=True)
        _write(tmp_path / 'only.txt')

        assert walk_files(str(tmp_path)) == [str(tmp_path / 'only.txt')]

    def test_returns_absolute_paths(self, tmp_path, monkeypatch):
        """Relative roots still produce absolute paths"""
        _write(tmp_path / 'site' / 'index.html')
        monkeypatch.chdir(tmp_path)

        result = walk_files('site')

        assert result == [os.path.join(str(tmp_path), 'site', 'index.html')]

    def test_empty_root(self, tmp_path):
        assert walk_files(str(tmp_path)) == []

    def test_missing_root_raises(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            walk_files(str(tmp_path / 'missing'))

    @pytest.mark.skipif(sys.platform == 'win32', reason='symlinks need privileges on Windows')
    def test_skips_symlinks(self, tmp_path):
        """Links to files and to directories are both skipped"""
        target = _write(tmp_path / 'outside' / 'secret.txt')
        root = tmp_path / 'root'
        _write(root / 'real.txt')
        os.symlink(str(target), str(root / 'link.txt'))
        os.symlink(str(tmp_path / 'outside'), str(root / 'linked_dir'))
        # a link back to the root would loop forever if followed
        os.symlink(str(root), str(root / 'loop'))

        assert walk_files(str(root)) == [str(root / 'real.txt')]


class TestObjectKey:

    def test_relative_path_with_forward_slashes(self, tmp_path):
        path = tmp_path / 'sub' / 'b.txt'
        assert object_key(str(tmp_path), str(path)) == 'sub/b.txt'

    def test_backslashes_are_normalized(self, tmp_path):
        """Windows style separators become forward slashes"""
        assert object_key(str(tmp_path), str(tmp_path / 'assets\\app.js')) == 'assets/app.js'

    def test_file_at_root(self, tmp_path):
        assert object_key(str(tmp_path), str(tmp_path / 'index.html')) == 'index.html'


class TestCollectSiteObjects:

    def test_example_tree(self, tmp_path):
        """a.txt and sub/b.txt give keys a.txt and sub/b.txt"""
        _write(tmp_path / 'a.txt')
        _write(tmp_path / 'sub' / 'b.txt')

        keys = {obj.key for obj in collect_site_objects(str(tmp_path))}

        assert keys == {'a.txt', 'sub/b.txt'}

    def test_empty_tree_declares_nothing(self, tmp_path):
        assert collect_site_objects(str(tmp_path)) == []

    def test_rewalk_gives_identical_keys(self, client_dist):
        first = [obj.key for obj in collect_site_objects(str(client_dist))]
        second = [obj.key for obj in collect_site_objects(str(client_dist))]
        assert first == second
        assert len(set(first)) == len(first) == 3

    def test_content_types(self, client_dist):
        types = {obj.key: obj.content_type for obj in collect_site_objects(str(client_dist))}
        assert types['index.html'] == 'text/html'
        assert types['assets/index.css'] == 'text/css'

    def test_unknown_extension_falls_back(self, tmp_path):
        _write(tmp_path / 'blob.unknownext')
        [obj] = collect_site_objects(str(tmp_path))
        assert obj.content_type == 'application/octet-stream'

    def test_paths_point_at_files(self, client_dist):
        for obj in collect_site_objects(str(client_dist)):
            assert os.path.isfile(obj.path)
            assert obj.path.endswith(obj.key.replace('/', os.sep))

    def test_missing_root_raises(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            collect_site_objects(str(tmp_path / 'dist'))

    @pytest.mark.skipif(os.sep == '\\', reason='backslash is a separator on Windows')
    def test_colliding_keys_are_rejected(self, tmp_path):
        """A literal backslash in a name collides with the nested path"""
        _write(tmp_path / 'sub' / 'b.txt')
        _write(tmp_path / 'sub\\b.txt')

        with pytest.raises(ObjectKeyCollisionError) as excinfo:
            collect_site_objects(str(tmp_path))

        assert excinfo.value.key == 'sub/b.txt'

    def test_reports_through_engine_log(self, client_dist, monkeypatch):
        """The file count goes to the Pulumi engine log"""
        info = Mock()
        monkeypatch.setattr('irc_infra.files.pulumi.log.info', info)
        collect_site_objects(str(client_dist))
        info.assert_called_once_with(f'Found 3 client files under {client_dist}')
