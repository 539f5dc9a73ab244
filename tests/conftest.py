import os

from gasprobe.conf import UNITTESTS_SETTINGS_FILEPATH

os.environ['GASPROBE_CONFIG_YAML'] = os.environ.get('GASPROBE_TEST_CONFIG_YAML', UNITTESTS_SETTINGS_FILEPATH)
