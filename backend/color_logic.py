from dataclasses import dataclass, field
from types import MappingProxyType

from color_math import brightness, saturation, skin_tone, tone
from season_data import SEASONS, get_season_info

BRIGHT_SKIN_THRESHOLD = 140
HIGH_SATURATION_THRESHOLD = 25
HIGH_CONTRAST_THRESHOLD = 100
LIGHT_EYE_THRESHOLD = 40
LIGHT_HAIR_THRESHOLD = 50
WARM_EYE_NUDGE_THRESHOLD = 30


@dataclass(frozen=True)
class ColorSample:
    hair: tuple
    eye: tuple
    skin: tuple
    lip: tuple

    def to_dict(self):
        return {part: list(getattr(self, part)) for part in ('hair', 'eye', 'skin', 'lip')}


@dataclass(frozen=True)
class Diagnosis:
    season: str
    scores: MappingProxyType
    season_info: MappingProxyType
    analysis: MappingProxyType
    factors: tuple = field(default=())

    def to_dict(self):
        return {
            'season': self.season,
            'scores': dict(self.scores),
            'season_info': {
                key: list(value) if isinstance(value, tuple) else value
                for key, value in self.season_info.items()
            },
            'analysis': dict(self.analysis),
            'factors': [
                {'factor': name, 'points': dict(points)}
                for name, points in self.factors
            ],
        }


def freeze_season_info(info):
    """Read-only copy of a season table entry, lists turned into tuples"""
    return MappingProxyType({
        key: tuple(value) if isinstance(value, list) else value
        for key, value in info.items()
    })


def select_season(scores):
    """Left-to-right max fold: on a tie the earlier season wins"""
    best = SEASONS[0]
    for season in SEASONS[1:]:
        if scores[season] > scores[best]:
            best = season
    return best


class PersonalColorAnalyst:
    """Additive four-season scoring over sampled hair, eye, skin and lip colors"""

    def measure(self, sample):
        """Raw measurements shared by scoring and the displayed analysis"""
        skin_brightness = brightness(sample.skin)
        hair_brightness = brightness(sample.hair)
        return {
            'skin_tone': skin_tone(sample.skin),
            'lip_tone': tone(sample.lip),
            'eye_brightness': brightness(sample.eye),
            'skin_brightness': skin_brightness,
            'hair_brightness': hair_brightness,
            'skin_saturation': saturation(sample.skin),
            'average_saturation': (saturation(sample.lip) + saturation(sample.hair)) / 2,
            'contrast': abs(hair_brightness - skin_brightness),
        }

    def score_seasons(self, m):
        scores = dict.fromkeys(SEASONS, 0)
        factors = []

        def award(name, points):
            for season, value in points.items():
                scores[season] += value
            factors.append((name, points))

        # 1. Base color from skin and lip tone
        if m['skin_tone'] == 'warm':
            award('skin_warm', {'spring': 3, 'autumn': 3})
        else:
            award('skin_cool', {'summer': 3, 'winter': 3})

        if m['lip_tone'] == 'warm':
            award('lip_warm', {'spring': 1, 'autumn': 1})
        else:
            award('lip_cool', {'summer': 1, 'winter': 1})

        # 2. Eye brightness
        if m['eye_brightness'] > LIGHT_EYE_THRESHOLD:
            award('eye_light', {'spring': 2, 'summer': 2})
        else:
            award('eye_dark', {'autumn': 2, 'winter': 2})

        # 3. Skin brightness
        if m['skin_brightness'] > BRIGHT_SKIN_THRESHOLD:
            award('skin_bright', {'spring': 1, 'summer': 1, 'winter': 1})
        else:
            award('skin_deep', {'autumn': 2})

        # 4. Hair brightness
        if m['hair_brightness'] > LIGHT_HAIR_THRESHOLD:
            award('hair_light', {'spring': 1, 'summer': 1})
        else:
            award('hair_dark', {'autumn': 1, 'winter': 1})

        # 5. Skin saturation
        if m['skin_saturation'] > HIGH_SATURATION_THRESHOLD:
            award('skin_vivid', {'spring': 1, 'autumn': 1})
        else:
            award('skin_soft', {'summer': 1, 'winter': 1})

        # 6. Lip and hair saturation
        if m['average_saturation'] > HIGH_SATURATION_THRESHOLD:
            award('features_vivid', {'spring': 2, 'winter': 2})
        else:
            award('features_soft', {'summer': 2, 'autumn': 2})

        # 7. Hair/skin contrast
        if m['contrast'] > HIGH_CONTRAST_THRESHOLD:
            award('contrast_high', {'winter': 3, 'spring': 1})
        else:
            award('contrast_low', {'summer': 2, 'autumn': 2})

        # 8. Nudges for the common borderline cases
        if m['skin_tone'] == 'warm' and m['eye_brightness'] > WARM_EYE_NUDGE_THRESHOLD:
            award('warm_clear_eyes', {'spring': 1})
        if m['skin_tone'] == 'cool' and m['contrast'] < HIGH_CONTRAST_THRESHOLD:
            award('cool_soft_contrast', {'summer': 1})

        return scores, factors

    def summarize(self, m):
        return {
            'skin_tone': m['skin_tone'],
            'lip_tone': m['lip_tone'],
            'brightness': 'bright' if m['skin_brightness'] > BRIGHT_SKIN_THRESHOLD else 'deep',
            'saturation': 'vivid' if m['average_saturation'] > HIGH_SATURATION_THRESHOLD else 'soft',
            'contrast': 'high' if m['contrast'] > HIGH_CONTRAST_THRESHOLD else 'low',
            'contrast_value': m['contrast'],
            'skin_brightness': m['skin_brightness'],
            'hair_brightness': m['hair_brightness'],
            'eye_brightness': m['eye_brightness'],
        }

    def analyze(self, sample):
        m = self.measure(sample)
        scores, factors = self.score_seasons(m)
        season = select_season(scores)

        return Diagnosis(
            season=season,
            scores=MappingProxyType(scores),
            season_info=freeze_season_info(get_season_info(season)),
            analysis=MappingProxyType(self.summarize(m)),
            factors=tuple((name, MappingProxyType(points)) for name, points in factors),
        )


def diagnose_personal_color(sample):
    return PersonalColorAnalyst().analyze(sample)
