import pandas as pd
import pytest
import matplotlib.pyplot as plt

from heapmap.cli import DEFAULT_OUTPUT, main, parse_args
from heapmap.geometry import DEBUG_SLOT_SIZE, SLOT_SIZE

START_A = 0x10018
S = 40


@pytest.fixture
def dump(write_dump, entry):
    return write_dump([
        {'type': 'ROOT', 'root': 'vm', 'references': [hex(START_A)]},
        entry(START_A, pinned=True),
        entry(START_A + S, pinned=True),
        entry(START_A + 2 * S),
        entry(0x20008, pinned=False),
    ])


class TestParseArgs:

    def test_defaults(self):
        args = parse_args(['heap.json'])
        assert args.dump_file == 'heap.json'
        assert args.output == DEFAULT_OUTPUT
        assert args.slot_size == SLOT_SIZE
        assert args.csv_file is None

    def test_debug_slots(self):
        assert parse_args(['heap.json', '--debug-slots']).slot_size == DEBUG_SLOT_SIZE

    def test_slot_options_exclusive(self):
        with pytest.raises(SystemExit):
            parse_args(['heap.json', '--debug-slots', '--slot-size', '48'])


class TestMain:

    def test_summary_and_image(self, dump, tmp_path, capsys):
        output = tmp_path / 'out.png'
        main([str(dump), '-o', str(output)])

        out = capsys.readouterr().out
        assert 'Pages:          2\n' in out
        assert 'Pinned:         2\n' in out
        assert 'Pinned ratio:   0.5\n' in out
        assert 'Total:          4\n' in out

        image = plt.imread(output)
        assert image.shape == (2 * 408, 2 * 2, 4)
        assert output.read_bytes()[28] == 1  # Adam7

    def test_csv_and_top(self, dump, tmp_path, capsys):
        csv_file = tmp_path / 'pages.csv'
        main([str(dump), '-o', str(tmp_path / 'out.png'),
              '--csv', str(csv_file), '--top', '1'])

        out = capsys.readouterr().out
        assert 'Top 1 pages by pinned objects:' in out
        assert '0x10000' in out

        df = pd.read_csv(csv_file)
        assert df['pinned'].tolist() == [2, 0]
        assert df['occupied'].tolist() == [3, 1]

    def test_missing_file(self, tmp_path, capsys):
        missing = tmp_path / 'missing.json'
        with pytest.raises(SystemExit) as excinfo:
            main([str(missing), '-o', str(tmp_path / 'out.png')])
        assert excinfo.value.code == 1
        assert f"Error: File '{missing}' not found" in capsys.readouterr().err

    def test_malformed_dump(self, write_dump, tmp_path, capsys):
        path = write_dump(['{"address": "0x10018"}', '{not json'])
        output = tmp_path / 'out.png'
        with pytest.raises(SystemExit) as excinfo:
            main([str(path), '-o', str(output)])
        assert excinfo.value.code == 1
        assert 'line 2' in capsys.readouterr().err
        assert not output.exists()

    def test_misaligned_dump(self, write_dump, entry, tmp_path, capsys):
        path = write_dump([entry(START_A + S // 2)])
        output = tmp_path / 'out.png'
        with pytest.raises(SystemExit):
            main([str(path), '-o', str(output)])
        assert 'outside the slot layout' in capsys.readouterr().err
        assert not output.exists()

    def test_duplicate_address(self, write_dump, entry, tmp_path, capsys):
        path = write_dump([entry(START_A), entry(START_A, pinned=True)])
        with pytest.raises(SystemExit):
            main([str(path), '-o', str(tmp_path / 'out.png')])
        assert 'Duplicate object' in capsys.readouterr().err

    def test_only_roots(self, write_dump, tmp_path, capsys):
        path = write_dump([{'type': 'ROOT', 'root': 'vm', 'references': []}])
        with pytest.raises(SystemExit):
            main([str(path), '-o', str(tmp_path / 'out.png')])
        captured = capsys.readouterr()
        assert 'Pages:          0\n' in captured.out
        assert 'No heap pages to render' in captured.err
