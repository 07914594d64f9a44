SEASONS = ('spring', 'summer', 'autumn', 'winter')

SEASON_INFO = {
    'spring': {
        'name': 'Spring (Warm Spring)',
        'name_en': 'Spring',
        'description': 'Bright, clear skin with a yellow undertone. Eyes sparkle and '
                       'the overall impression is lively and youthful.',
        'characteristics': [
            'Skin: light, glowing, yellow undertone',
            'Eyes: light brown, caramel',
            'Hair: light brown, chestnut',
            'Mood: radiant, fresh, energetic',
        ],
        'colors': ['#FFD700', '#FF6B9D', '#87CEEB', '#98FB98', '#FFA07A', '#FFE4B5'],
        'recommendations': 'Bright, vivid colors suit you: coral pink, peach, ivory and turquoise.',
        'avoid': 'Avoid dark colors, strongly blue-based colors and muted greys.',
    },
    'summer': {
        'name': 'Summer (Cool Summer)',
        'name_en': 'Summer',
        'description': 'Translucent skin with a blue undertone and a soft, refined look. '
                       'Eyes are gentle greyish brown or black. Elegant and cool overall.',
        'characteristics': [
            'Skin: light, translucent, blue undertone',
            'Eyes: soft brown, greyish black',
            'Hair: soft black, greyish brown',
            'Mood: graceful, refined, cool',
        ],
        'colors': ['#E6E6FA', '#B0C4DE', '#DDA0DD', '#F0E68C', '#87CEEB', '#FFB6C1'],
        'recommendations': 'Soft, pale colors suit you: lavender, rose pink, mint blue and baby pink.',
        'avoid': 'Avoid deep colors, strongly yellow-based colors, orange and brown.',
    },
    'autumn': {
        'name': 'Autumn (Warm Autumn)',
        'name_en': 'Autumn',
        'description': 'Matte skin with a yellow undertone and a deep, calm presence. '
                       'Eyes are deep brown or golden. Chic and mature overall.',
        'characteristics': [
            'Skin: matte, yellow undertone, ochre',
            'Eyes: deep brown, dark brown',
            'Hair: dark brown, burnt umber',
            'Mood: chic, composed, mature',
        ],
        'colors': ['#8B4513', '#D2691E', '#F4A460', '#BDB76B', '#808000', '#CD853F'],
        'recommendations': 'Deep, warm colors suit you: terracotta, mustard, khaki, brown and beige.',
        'avoid': 'Avoid very bright colors, strongly blue-based colors and pastels.',
    },
    'winter': {
        'name': 'Winter (Cool Winter)',
        'name_en': 'Winter',
        'description': 'Clear skin with a blue undertone and a sharp contrast between light '
                       'and dark. Eyes are very dark. Sharp and cool overall.',
        'characteristics': [
            'Skin: pale or healthy blue undertone',
            'Eyes: black, dark brown, strong contrast',
            'Hair: black, dark shades',
            'Mood: cool, sharp, striking',
        ],
        'colors': ['#000000', '#FFFFFF', '#FF1493', '#4169E1', '#9370DB', '#00CED1'],
        'recommendations': 'Clear, defined colors suit you: pure white, black, royal blue and shocking pink.',
        'avoid': 'Avoid strongly yellow-based colors, beige, orange and other warm shades.',
    },
}

HAIR_COLOR_PALETTES = {
    'spring': [
        {'name': 'Honey Blonde', 'color': '#D4A574'},
        {'name': 'Golden Brown', 'color': '#B8860B'},
        {'name': 'Light Caramel', 'color': '#C68642'},
        {'name': 'Warm Beige', 'color': '#D2B48C'},
        {'name': 'Copper Brown', 'color': '#B87333'},
        {'name': 'Peach Blonde', 'color': '#E6B88A'},
    ],
    'summer': [
        {'name': 'Ash Blonde', 'color': '#C4B5A0'},
        {'name': 'Rose Brown', 'color': '#9B7B7B'},
        {'name': 'Soft Greige', 'color': '#B8AFA8'},
        {'name': 'Lavender Ash', 'color': '#A895A0'},
        {'name': 'Cool Beige', 'color': '#C9B8A3'},
        {'name': 'Silver Grey', 'color': '#A8A8A0'},
    ],
    'autumn': [
        {'name': 'Dark Brown', 'color': '#654321'},
        {'name': 'Chestnut', 'color': '#8B4513'},
        {'name': 'Mahogany', 'color': '#823D3D'},
        {'name': 'Autumn Red', 'color': '#A0522D'},
        {'name': 'Deep Copper', 'color': '#A0522D'},
        {'name': 'Warm Black', 'color': '#3C2F2F'},
    ],
    'winter': [
        {'name': 'Jet Black', 'color': '#1C1C1C'},
        {'name': 'Cool Black', 'color': '#252525'},
        {'name': 'Blue Black', 'color': '#1F2937'},
        {'name': 'Silver', 'color': '#C0C0C0'},
        {'name': 'Platinum Blonde', 'color': '#E5E4E2'},
        {'name': 'Burgundy', 'color': '#800020'},
    ],
}

# Three picks per season, with the wording sent to the image edit model
RECOMMENDED_HAIR_COLORS = {
    'spring': [
        {'name': 'Honey Blonde', 'color': '#D4A574', 'ai_color': 'honey blonde',
         'description': 'warm honey blonde with golden highlights'},
        {'name': 'Light Caramel', 'color': '#C68642', 'ai_color': 'light caramel',
         'description': 'light caramel brown with warm undertones'},
        {'name': 'Golden Brown', 'color': '#B8860B', 'ai_color': 'golden brown',
         'description': 'rich golden brown with amber tones'},
    ],
    'summer': [
        {'name': 'Ash Blonde', 'color': '#C4B5A0', 'ai_color': 'ash blonde',
         'description': 'cool ash blonde with silver undertones'},
        {'name': 'Soft Greige', 'color': '#B8AFA8', 'ai_color': 'soft greige',
         'description': 'soft greige (grey-beige blend) with cool tones'},
        {'name': 'Rose Brown', 'color': '#9B7B7B', 'ai_color': 'rose brown',
         'description': 'rose brown with subtle pink undertones'},
    ],
    'autumn': [
        {'name': 'Chestnut', 'color': '#8B4513', 'ai_color': 'chestnut',
         'description': 'deep chestnut brown with warm red tones'},
        {'name': 'Mahogany', 'color': '#823D3D', 'ai_color': 'mahogany',
         'description': 'rich mahogany with reddish-brown tones'},
        {'name': 'Dark Brown', 'color': '#654321', 'ai_color': 'dark brown',
         'description': 'deep dark brown with warm undertones'},
    ],
    'winter': [
        {'name': 'Jet Black', 'color': '#1C1C1C', 'ai_color': 'jet black',
         'description': 'pure jet black with cool blue undertones'},
        {'name': 'Blue Black', 'color': '#1F2937', 'ai_color': 'blue black',
         'description': 'blue-black with subtle blue highlights'},
        {'name': 'Platinum Blonde', 'color': '#E5E4E2', 'ai_color': 'platinum blonde',
         'description': 'icy platinum blonde with silver highlights'},
    ],
}


def get_season_info(season):
    return SEASON_INFO[season]


def get_hair_color_palette(season):
    return HAIR_COLOR_PALETTES.get(season, HAIR_COLOR_PALETTES['spring'])


def get_recommended_hair_colors(season):
    return RECOMMENDED_HAIR_COLORS.get(season, RECOMMENDED_HAIR_COLORS['spring'])
